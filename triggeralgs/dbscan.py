"""Incremental DBSCAN clustering of hits arriving in time order."""

from __future__ import annotations

import enum
from bisect import bisect_left
from collections.abc import Iterator, Sequence

from .objects import TriggerPrimitive

CLUSTER_UNDEFINED = -1
CLUSTER_NOISE = -2


class Connectedness(enum.Enum):
    UNDEFINED = enum.auto()
    NOISE = enum.auto()
    CORE = enum.auto()
    EDGE = enum.auto()


class Completeness(enum.Enum):
    INCOMPLETE = enum.auto()
    COMPLETE = enum.auto()


class HitSet:
    """Hits kept in time order, each at most once."""

    def __init__(self) -> None:
        self.hits: list[Hit] = []

    def insert(self, hit: Hit) -> None:
        # Hits usually arrive at or near the end, so scan backwards.
        pos = len(self.hits)
        while pos > 0 and self.hits[pos - 1].time >= hit.time:
            if self.hits[pos - 1] is hit:
                return
            pos -= 1
        self.hits.insert(pos, hit)

    def clear(self) -> None:
        self.hits.clear()

    def __iter__(self) -> Iterator[Hit]:
        return iter(self.hits)

    def __len__(self) -> int:
        return len(self.hits)

    def __getitem__(self, index: int) -> Hit:
        return self.hits[index]


class Hit:
    """A point in (time, channel) space with its neighbourhood."""

    __slots__ = ("time", "chan", "cluster", "connectedness", "neighbours", "primitive")

    def __init__(self, time: float, chan: int, primitive: TriggerPrimitive | None = None) -> None:
        self.primitive = TriggerPrimitive()
        self.neighbours = HitSet()
        self.reset(time, chan, primitive)

    def reset(self, time: float, chan: int, primitive: TriggerPrimitive | None = None) -> None:
        self.time = time
        self.chan = chan
        self.cluster = CLUSTER_UNDEFINED
        self.connectedness = Connectedness.UNDEFINED
        self.neighbours.clear()
        if primitive is not None:
            self.primitive = primitive

    def add_potential_neighbour(self, other: Hit, eps: float, min_pts: int) -> bool:
        """Link ``other`` as a neighbour if within ``eps``; return whether it was."""
        if other is self or euclidean_distance_sqr(self, other) >= eps * eps:
            return False
        self.neighbours.insert(other)
        if len(self.neighbours) + 1 >= min_pts:
            self.connectedness = Connectedness.CORE
        other.neighbours.insert(self)
        if len(other.neighbours) + 1 >= min_pts:
            other.connectedness = Connectedness.CORE
        return True

    def __repr__(self) -> str:
        return f"Hit(time={self.time!r}, chan={self.chan!r}, cluster={self.cluster!r})"


def euclidean_distance_sqr(a: Hit, b: Hit) -> float:
    """Squared distance between two hits in (time, channel) space."""
    return (a.time - b.time) ** 2 + (a.chan - b.chan) ** 2


def neighbours_sorted(hits: Sequence[Hit], q: Hit, eps: float, min_pts: int) -> int:
    """Link ``q`` with its neighbours among time-sorted ``hits``; return how many."""
    count = 0
    for hit in reversed(hits):
        if hit.time > q.time + eps:
            continue
        if hit.time < q.time - eps:
            break
        if q.add_potential_neighbour(hit, eps, min_pts):
            count += 1
    return count


class Cluster:
    """A group of density-connected hits."""

    def __init__(self, index: int) -> None:
        self.index = index
        self.completeness = Completeness.INCOMPLETE
        self.hits = HitSet()
        self.latest_time = 0.0
        self.latest_core_point: Hit | None = None

    def maybe_add_new_hit(self, new_hit: Hit, eps: float, min_pts: int) -> bool:
        """Add ``new_hit`` if it neighbours any hit in the cluster."""
        do_add = False
        start = bisect_left(self.hits.hits, new_hit.time - eps, key=lambda h: h.time)
        for hit in self.hits.hits[start:]:
            if hit.add_potential_neighbour(new_hit, eps, min_pts):
                do_add = True
                if len(hit.neighbours) + 1 >= min_pts:
                    hit.connectedness = Connectedness.CORE
                else:
                    hit.connectedness = Connectedness.EDGE
        if do_add:
            self.add_hit(new_hit)
        return do_add

    def add_hit(self, hit: Hit) -> None:
        self.hits.insert(hit)
        hit.cluster = self.index
        self.latest_time = max(self.latest_time, hit.time)
        if hit.connectedness == Connectedness.CORE and (
            self.latest_core_point is None or hit.time > self.latest_core_point.time
        ):
            self.latest_core_point = hit

    def steal_hits(self, other: Cluster) -> None:
        """Move every hit of ``other`` into this cluster and mark ``other`` complete."""
        for hit in other.hits:
            self.add_hit(hit)
        other.hits.clear()
        other.completeness = Completeness.COMPLETE


class IncrementalDBSCAN:
    """DBSCAN over a stream of time-ordered hits, reporting clusters once they can no longer grow."""

    def __init__(self, eps: float, min_pts: int) -> None:
        self.eps = eps
        self.min_pts = min_pts
        self.hits: list[Hit] = []
        self.clusters: dict[int, Cluster] = {}
        self.latest_time = 0.0
        self.first_prim_time = 0
        self._next_cluster_index = 0

    def add_point(self, time: float, channel: float) -> list[Cluster]:
        """Add a bare point; return the clusters completed by it."""
        return self.add_hit(Hit(time, int(channel)))

    def add_primitive(self, prim: TriggerPrimitive) -> list[Cluster]:
        """Add a trigger primitive; return the clusters completed by it."""
        if self.first_prim_time == 0:
            self.first_prim_time = prim.time_start
        hit = Hit(1e-2 * (prim.time_start - self.first_prim_time), prim.channel, prim)
        return self.add_hit(hit)

    def _new_cluster(self, seed: Hit) -> None:
        cluster = Cluster(self._next_cluster_index)
        self.clusters[cluster.index] = cluster
        cluster.add_hit(seed)
        self._next_cluster_index += 1
        self.cluster_reachable(seed, cluster)

    def add_hit(self, new_hit: Hit) -> list[Cluster]:
        """Add a hit; return the clusters completed by it."""
        min_pts = self.min_pts
        self.hits.append(new_hit)
        self.latest_time = new_hit.time

        neighbours_sorted(self.hits, new_hit, self.eps, min_pts)

        neighbouring = sorted(
            {
                n.cluster
                for n in new_hit.neighbours
                if n.cluster not in (CLUSTER_UNDEFINED, CLUSTER_NOISE) and len(n.neighbours) + 1 >= min_pts
            }
        )

        if not neighbouring:
            if len(new_hit.neighbours) + 1 >= min_pts:
                new_hit.connectedness = Connectedness.CORE
                self._new_cluster(new_hit)
        else:
            cluster = self.clusters[neighbouring[0]]
            cluster.add_hit(new_hit)
            for q in new_hit.neighbours:
                if q.cluster in (CLUSTER_UNDEFINED, CLUSTER_NOISE):
                    cluster.add_hit(q)
                # q has just become a core point through new_hit.
                if len(q.neighbours) + 1 == min_pts:
                    for r in q.neighbours:
                        cluster.add_hit(r)
            for index in neighbouring[1:]:
                cluster.steal_hits(self.clusters[index])

        # new_hit and a noise neighbour may together make that neighbour core.
        for neighbour in new_hit.neighbours:
            if (
                len(neighbour.neighbours) + 1 >= min_pts
                and neighbour.cluster in (CLUSTER_NOISE, CLUSTER_UNDEFINED)
                and new_hit.cluster in (CLUSTER_NOISE, CLUSTER_UNDEFINED)
            ):
                self._new_cluster(neighbour)

        completed: list[Cluster] = []
        for index, cluster in list(self.clusters.items()):
            if cluster.latest_time < self.latest_time - self.eps:
                cluster.completeness = Completeness.COMPLETE
            if cluster.completeness == Completeness.COMPLETE:
                # Clusters merged into another were emptied by steal_hits.
                if len(cluster.hits):
                    completed.append(cluster)
                del self.clusters[index]
        return completed

    def cluster_reachable(self, seed_hit: Hit, cluster: Cluster) -> None:
        """Add to ``cluster`` every hit density-reachable from ``seed_hit``."""
        seeds = list(seed_hit.neighbours)
        while seeds:
            q = seeds.pop()
            if q.connectedness == Connectedness.NOISE:
                cluster.add_hit(q)
            if q.cluster != CLUSTER_UNDEFINED:
                continue
            cluster.add_hit(q)
            if len(q.neighbours) + 1 >= self.min_pts:
                q.connectedness = Connectedness.CORE
                seeds.extend(q.neighbours)

    def trim_hits(self) -> None:
        """Forget hits too old to matter for any active cluster."""
        if self.clusters:
            earliest = min(cluster.hits[0].time for cluster in self.clusters.values())
        else:
            earliest = self.latest_time
        cut = bisect_left(self.hits, earliest - 10 * self.eps, key=lambda h: h.time)
        del self.hits[:cut]
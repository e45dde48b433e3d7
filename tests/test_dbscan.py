from triggeralgs.dbscan import (
    CLUSTER_UNDEFINED,
    Cluster,
    Completeness,
    Connectedness,
    Hit,
    HitSet,
    IncrementalDBSCAN,
    euclidean_distance_sqr,
    neighbours_sorted,
)
from triggeralgs.objects import TriggerPrimitive


def test_euclidean_distance_sqr():
    assert euclidean_distance_sqr(Hit(0.0, 0), Hit(3.0, 4)) == 25


def test_hitset_keeps_time_order_without_duplicates():
    hits = [Hit(t, 0) for t in (5.0, 1.0, 3.0, 2.0)]
    hit_set = HitSet()
    for h in hits:
        hit_set.insert(h)
    hit_set.insert(hits[2])
    times = [h.time for h in hit_set]
    assert times == sorted(times)
    assert len(hit_set) == len(hits)


def test_add_potential_neighbour_symmetric():
    a, b = Hit(0.0, 0), Hit(1.0, 0)
    assert a.add_potential_neighbour(b, 2.0, 2)
    assert list(a.neighbours) == [b]
    assert list(b.neighbours) == [a]
    assert a.connectedness == Connectedness.CORE
    assert b.connectedness == Connectedness.CORE


def test_add_potential_neighbour_rejects_self_and_far():
    a, far = Hit(0.0, 0), Hit(10.0, 0)
    assert not a.add_potential_neighbour(a, 2.0, 2)
    assert not a.add_potential_neighbour(far, 2.0, 2)
    assert len(a.neighbours) == 0
    assert a.connectedness == Connectedness.UNDEFINED


def test_neighbours_sorted_counts_within_eps():
    hits = [Hit(t, 0) for t in (0.0, 5.0, 6.0)]
    q = Hit(6.5, 0)
    assert neighbours_sorted(hits + [q], q, 2.0, 3) == 2
    assert {id(h) for h in q.neighbours} == {id(hits[1]), id(hits[2])}


def test_cluster_maybe_add_new_hit():
    cluster = Cluster(3)
    seed = Hit(0.0, 0)
    cluster.add_hit(seed)
    assert not cluster.maybe_add_new_hit(Hit(10.0, 0), 2.0, 2)
    near = Hit(1.0, 0)
    assert cluster.maybe_add_new_hit(near, 2.0, 2)
    assert near.cluster == 3
    assert list(cluster.hits) == [seed, near]
    assert cluster.latest_time == near.time


def test_steal_hits():
    first, second = Cluster(0), Cluster(1)
    a, b = Hit(0.0, 0), Hit(1.0, 1)
    first.add_hit(a)
    second.add_hit(b)
    first.steal_hits(second)
    assert list(first.hits) == [a, b]
    assert b.cluster == 0
    assert len(second.hits) == 0
    assert second.completeness == Completeness.COMPLETE


def test_cluster_completed_by_later_point():
    db = IncrementalDBSCAN(eps=2.0, min_pts=3)
    for t in (0.0, 1.0, 2.0):
        assert db.add_point(t, 0) == []
    assert len(db.clusters) == 1
    completed = db.add_point(10.0, 0)
    assert len(completed) == 1
    assert [h.time for h in completed[0].hits] == [0.0, 1.0, 2.0]
    assert db.clusters == {}


def test_isolated_points_are_noise():
    db = IncrementalDBSCAN(eps=1.0, min_pts=2)
    results = [db.add_point(t, 0) for t in (0.0, 10.0, 20.0)]
    assert results == [[], [], []]
    assert db.clusters == {}
    assert all(h.cluster == CLUSTER_UNDEFINED for h in db.hits)


def test_add_primitive_keeps_primitives():
    db = IncrementalDBSCAN(eps=2.0, min_pts=3)
    tps = [TriggerPrimitive(time_start=t, channel=5) for t in (1000, 1100, 1200)]
    for tp in tps:
        db.add_primitive(tp)
    assert db.hits[0].time == 0.0
    completed = db.add_primitive(TriggerPrimitive(time_start=3000, channel=5))
    assert len(completed) == 1
    assert [h.primitive for h in completed[0].hits] == tps


def test_trim_hits_drops_old_hits():
    db = IncrementalDBSCAN(eps=1.0, min_pts=3)
    db.add_point(0.0, 0)
    db.add_point(100.0, 0)
    db.trim_hits()
    assert [h.time for h in db.hits] == [100.0]


def test_trim_hits_keeps_active_cluster():
    db = IncrementalDBSCAN(eps=2.0, min_pts=3)
    for t in (0.0, 1.0, 2.0):
        db.add_point(t, 0)
    db.trim_hits()
    assert [h.time for h in db.hits] == [0.0, 1.0, 2.0]
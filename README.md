# triggeralgs

Streaming trigger algorithms for a detector data-acquisition chain. Each
algorithm is a small stateful object: call it with one input at a time, and
it returns a list of whatever outputs that input completed (often empty).

The chain has three stages:

- **Trigger primitives** (`objects.TriggerPrimitive`) are single hits on a
  channel.
- **Activity makers** group primitives into `objects.TriggerActivity` objects.
- **Candidate makers** group activities into `objects.TriggerCandidate`
  objects, and a decision maker turns candidates into
  `objects.TriggerDecision` objects.

## Installation

```
pip install .
```

Nothing outside the standard library is needed. To run the tests:

```
pip install ".[test]"
pytest
```

## Quick start

```python
from triggeralgs.objects import TriggerPrimitive
from triggeralgs.registry import make_ta_maker

maker = make_ta_maker("TriggerActivityMakerPrescalePlugin")
maker.configure({"prescale": 2})

activities = []
for idx in range(10):
    tp = TriggerPrimitive(
        time_start=idx,
        time_peak=idx + 1,
        time_over_threshold=2,
        adc_integral=1000 + idx,
        adc_peak=1000 + idx,
        channel=idx,
    )
    activities.extend(maker(tp))

print(len(activities))  # 5: primitives 0, 2, 4, 6 and 8 pass
```

Configuration is a plain mapping with the same keys a JSON configuration
would carry. Keys that are missing keep their defaults.

## Data objects and windows

`triggeralgs.objects` holds the data classes, the enums for their `type` and
`algorithm` fields (`PrimitiveType`, `PrimitiveAlgorithm`, `ActivityType`,
`ActivityAlgorithm`, `CandidateType`, `CandidateAlgorithm`), the
`BadConfiguration` exception, and two sliding windows:

- `TPWindow` collects primitives, `TAWindow` collects activities.
- Both keep `time_start`, a running `adc_integral` and the `inputs` list, and
  offer `is_empty()`, `add()`, `clear()`, `reset()`, `move(item,
  window_length)` (drop inputs that started more than `window_length` before
  the new item, then add it) and `n_channels_hit()` (number of distinct
  channels in the window).

## Algorithms

Activity makers (primitive to activity):

- `prescale.TriggerActivityMakerPrescale`: turns every n-th primitive into a
  single-primitive activity (`prescale`, default 1).
- `horizontal_muon.TriggerActivityMakerHorizontalMuon`: sliding time window
  that triggers on ADC sum, channel multiplicity, channel adjacency (the
  default) or a large time over threshold; `check_adjacency()` and
  `check_tot()` report on the current window.
- `michel_electron.TriggerActivityMakerMichelElectron`: when a full window
  holds a track longer than `adjacency_threshold` channels, emits an activity
  if `check_bragg_peak()` and `check_kinks()` both accept it.
- `plane_coincidence.TriggerActivityMakerPlaneCoincidence`: keeps one window
  per readout plane. It is built with a function giving the plane of an
  offline channel (0 = U, 1 = Y, 2 = collection, anything else unconnected):

  ```python
  from triggeralgs.plane_coincidence import TriggerActivityMakerPlaneCoincidence

  maker = TriggerActivityMakerPlaneCoincidence(lambda channel: channel // 1000 % 3)
  ```

Candidate makers (activity to candidate):

- `prescale.TriggerCandidateMakerPrescale`: every n-th activity, widened by
  `readout_window_ticks_before` / `readout_window_ticks_after`.
- `simple_candidates.TriggerCandidateMakerADCSimpleWindow`: one candidate per
  activity.
- `simple_candidates.TriggerCandidateMakerBundleN`: one candidate per
  `bundle_size` activities (default 100).
- `simple_candidates.TriggerCandidateMakerChannelDistance` and
  `simple_candidates.TriggerCandidateMakerDBSCAN`: group activities until
  their total primitive count would exceed `max_tp_count` (default 1000).
- `channel_adjacency.TriggerCandidateMakerChannelAdjacency`,
  `horizontal_muon.TriggerCandidateMakerHorizontalMuon`: window activities
  and trigger on ADC sum or channel multiplicity.
- `michel_candidate.TriggerCandidateMakerMichelElectron`,
  `plane_coincidence.TriggerCandidateMakerPlaneCoincidence`: window
  activities and trigger on ADC sum; with no trigger flag set, every activity
  becomes its own candidate.

Decision maker: `decision.TriggerDecisionMakerSupernova` emits one decision
per candidate, with its `algorithm` field set from the monotonic clock in
62.5 MHz ticks (modulo 2**32).

`configure()` raises `objects.BadConfiguration` where a candidate maker could
never trigger or is asked for an unsupported combination of flags:
channel adjacency with neither flag set; horizontal muon with both or
neither; Michel electron with both; plane coincidence with
`trigger_on_n_channels`.

## Looking makers up by name

`registry.make_ta_maker(name)` and `registry.make_tc_maker(name)` build a
fresh maker from its registered name (for example
`"TriggerCandidateMakerBundleNPlugin"`) and raise `KeyError` for an unknown
name. `registry.ta_maker_names()` and `registry.tc_maker_names()` list the
known names, sorted. The plane coincidence activity maker is not registered,
since it needs a plane function to be built.

## Incremental DBSCAN

`dbscan.IncrementalDBSCAN(eps, min_pts)` clusters hits in (time, channel)
space as they arrive, in time order. `add_point(time, channel)` and
`add_primitive(prim)` return the `Cluster` objects that became complete
because of the new hit (a cluster is complete once the newest hit is more
than `eps` later than its latest hit). `add_primitive` measures time in
hundredths of a tick from the first primitive seen. `trim_hits()` forgets
hits more than `10 * eps` older than the earliest hit of any active cluster.

## What this package does not do

- It has no command-line program and reads or writes no data files; feed the
  makers from your own code.
- It has no channel map; the plane coincidence activity maker relies on the
  plane function you give it.
- There is no activity maker that runs `IncrementalDBSCAN` over primitives,
  and no activity makers feeding the channel-distance, channel-adjacency,
  bundle or ADC-simple-window candidate makers; those candidate makers accept
  any `TriggerActivity`.
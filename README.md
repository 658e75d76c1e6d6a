# mnemekit

Building blocks for an event-sourced memory layer for LLM agents.

Every change to memory is an event appended to a durable, time-ordered log.
Metrics and dashboard figures are derived from records of that activity, so
the log stays the single source of truth.

## What is inside

- `mnemekit.eventlog`: the append-only `EventLog`, stored as an SQLite file
  (`events.sqlite3`) inside the directory it is opened on. Events must be
  JSON-serialisable. Every entry gets a 26-character, time-ordered identifier
  from `new_id()`, and `id_timestamp_ms()` recovers the millisecond time
  embedded in it. `append(event)` returns the new identifier;
  `read_from(after)` returns `LogEntry` objects strictly after a given id, or
  all of them when `after` is `None`. The log is a context manager and
  `close()` shuts it; storage failures and use after closing raise
  `StorageError`.
- `mnemekit.config`: reads runtime switches from an environment mapping
  (`os.environ` when none is given): `demo_mode_enabled`,
  `evolution_enabled`, `procedural_enabled`, `llm_backend_name`,
  `embedder_choice`, `server_port`, `procedural_min_batch` and `data_dir`.
  `embedder_choice()` raises `ConfigError` for anything other than `mock` or
  `fastembed`; `verify_embedder_consistency()` raises `ConfigError` when any
  recorded model id differs from the configured one.
- `mnemekit.metrics`: `MetricsCollector` records per-search `SearchMetrics`.
  It keeps a rolling window of the last 200 queries, up to 60 minute-wide
  history buckets with gaps filled by empty buckets (out-of-order timestamps
  are ignored by the history), and lifetime statistics. `rollup()` and
  `history()` return plain dataclasses; `now_ms()` gives the wall-clock time
  in unix milliseconds.
- `mnemekit.metrics_types` and `mnemekit.buckets`: the dataclasses and the
  percentile, bucket and lifetime arithmetic behind the collector.
- `mnemekit.ranking`: `Hit`, `boost_sourced_hits()` (a 5 % score lift for
  hits that belong to an ingested source, then a stable re-sort, highest
  first), `min_max_score()` and `compute_score_envelope()`.
- `mnemekit.search_view`: `parse_search_params()` validates `q` and `k`
  (default 5, at least 1; bad input raises `ValueError`), and
  `to_hit_view()` joins a hit with its `MemoryRow` and source title.
- `mnemekit.evolve_stats` and `mnemekit.procedural_stats`: aggregates for an
  evolution timeline and a procedural-compiler dashboard, such as
  `win_rate_pct`, `mean_objective_delta`, `parse_rejection_tokens` and
  `top_rejection_reasons`.
- `mnemekit.demo_llm`: `DemoLlmClient`, a deterministic stand-in LLM whose
  answers are derived from the prompt's content, so demo enrichments differ
  from one memory to the next.
- `mnemekit.procedural_demo`: the seed system prompt and canaries, benchmark
  tasks and safety probes, two synthetic judges (`AlwaysPassJudge`,
  `BiasedJudge`), the body-aware `SmartDemoExecutor`, and
  `synthetic_outcome()` for a repeating success/failure pattern.

## Examples

Pick informative keywords out of a text:

```python
from mnemekit.demo_llm import top_words

top_words("The quick brown fox and the cat", 5)
# ['quick', 'brown', 'fox', 'cat']
```

Tally the reasons behind rejected proposals:

```python
from mnemekit.procedural_stats import parse_rejection_tokens

parse_rejection_tokens("c0=[baseline,canaries] c1=[judges]")
# ['baseline', 'canaries', 'judges']
```

Append to and read back the event log:

```python
from mnemekit.eventlog import EventLog

with EventLog("./mneme-data") as log:
    first = log.append({"kind": "MemoryWritten", "content": "the market closed green"})
    log.append({"kind": "MemoryWritten", "content": "revenue grew"})
    later = log.read_from(first)   # only the second entry
```

Collect search telemetry:

```python
from mnemekit.metrics import MetricsCollector

collector = MetricsCollector()
# collector.record(search_metrics) after each search, then:
rollup = collector.rollup()
history = collector.history()
```

The stand-in LLM is asynchronous:

```python
import asyncio
from mnemekit.demo_llm import DemoLlmClient

client = DemoLlmClient()
asyncio.run(client.complete("A new memory was just recorded:\nfoo"))
# '1'
```

## What the package does not do

mnemekit is a library of parts. It has no command-line program and no HTTP
server or dashboard pages. It contains no embedders, no vector or BM25
indexes, no hybrid retriever or answer synthesizer, and no background workers
for embedding, memory evolution or procedural compilation. The configuration
helpers only read settings; nothing in the package acts on them by starting
services.

## Requirements

Python 3.10 or later. The package uses only the standard library.
import csv
import json
import time


class RunMetrics:
    """Stage transition log for one pipeline run."""

    def __init__(self, clock=time.perf_counter):
        self._clock = clock
        self._t0 = None
        self.rows = []

    def start(self):
        self._t0 = self._clock()
        self.rows = []

    def append(self, stage, message="", status=""):
        if self._t0 is None:
            self._t0 = self._clock()
        elapsed = self._clock() - self._t0
        self.rows.append((len(self.rows), stage, message, status, float(elapsed)))

    def stage_seconds(self):
        """Seconds spent in each stage, measured to the next transition."""
        out = {}
        for (_, stage, _, _, t), nxt in zip(self.rows, self.rows[1:]):
            out[stage] = out.get(stage, 0.0) + (nxt[4] - t)
        return out

    @property
    def elapsed(self):
        return self.rows[-1][4] if self.rows else 0.0

    def save_csv(self, path):
        with open(path, "w", newline="", encoding="utf-8") as f:
            w = csv.writer(f)
            w.writerow(["step", "stage", "message", "status", "elapsed_s"])
            for row in self.rows:
                w.writerow(row)


def save_metrics_json(path, metrics, result, params, *, extra=None):
    data = {
        "n_items": result.size if result is not None else 0,
        "order": list(result.order) if result is not None else [],
        "elapsed_s": float(metrics.elapsed),
        "stage_seconds": metrics.stage_seconds(),
        "params": params,
    }
    if extra:
        data.update(extra)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def save_order_csv(path, rows):
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["rank", "index", "similarity_to_prev", "text"])
        for row in rows:
            sim = "" if row.similarity is None else f"{row.similarity:.4f}"
            w.writerow([row.rank, row.index, sim, row.text])


def save_layout_csv(path, result, positions):
    with open(path, "w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerow(["index", "x", "y", "text"])
        for i in range(result.size):
            w.writerow([i, float(positions[i, 0]), float(positions[i, 1]), result.items[i]])

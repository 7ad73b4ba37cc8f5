import itertools
import threading

import numpy as np
import pytest

from semsort.backends.handles import Collaborators
from semsort.engine.codec import DEFAULT_CODEC
from semsort.engine.problem import problem_locations

# Cat and Dog point the same way, Car is orthogonal to both.
ANIMAL_TABLE = {
    "Cat": [1.0, 0.0, 0.0],
    "Dog": [0.9, 0.1, 0.0],
    "Car": [0.0, 0.0, 1.0],
}


class LookupEmbedder:
    """Table lookup; unknown texts get a seeded random vector."""

    def __init__(self, table=None, dim=3):
        self.table = dict(table or {})
        self.dim = dim
        self.loads = 0
        self.calls = []

    def load(self):
        self.loads += 1

    def embed(self, texts):
        self.calls.append(list(texts))
        out = []
        for text in texts:
            if text in self.table:
                out.append(self.table[text])
            else:
                rng = np.random.default_rng(sum(ord(c) for c in text))
                out.append(rng.normal(size=self.dim))
        return np.asarray(out, dtype=np.float32)


class FirstAxesProjector:
    def __init__(self):
        self.loads = 0

    def load(self):
        self.loads += 1

    def project(self, vectors):
        v = np.asarray(vectors, dtype=np.float64)
        out = np.zeros((v.shape[0], 2))
        k = min(2, v.shape[1])
        out[:, :k] = v[:, :k]
        return out


class BruteForceSolver:
    """Exact open-path TSP over the supplied matrix, anchored at the shift start.

    Reports locations in reverse first-seen order so callers cannot rely on
    item order lining up with matrix order.
    """

    def __init__(self, reverse=True, extra_locations=(), revisit_anchor=True):
        self.reverse = reverse
        self.extra_locations = list(extra_locations)
        self.revisit_anchor = revisit_anchor
        self.loads = 0
        self.locations = None
        self.matrices = None
        self.termination = None

    def load(self):
        self.loads += 1

    def routing_locations(self, problem):
        locs = problem_locations(problem) + self.extra_locations
        if self.reverse:
            locs = locs[::-1]
        self.locations = locs
        return list(locs)

    def solve(self, problem, matrices, termination):
        self.matrices = matrices
        self.termination = termination
        size = len(self.locations)
        dist = np.asarray(matrices[0]["distances"]).reshape(size, size)
        start = problem["fleet"]["vehicles"][0]["shifts"][0]["start"]["location"]
        s = self.locations.index(start)
        rest = [p for p in range(size) if p != s]

        best, best_cost = None, None
        for perm in itertools.permutations(rest):
            path = (s,) + perm
            cost = sum(dist[a, b] for a, b in zip(path, path[1:]))
            if best_cost is None or cost < best_cost:
                best, best_cost = path, cost

        stops = [{"location": self.locations[p]} for p in best]
        if self.revisit_anchor:
            stops.append({"location": self.locations[s]})
        return {"tours": [{"vehicleId": "v1", "stops": stops}]}


class EmptySolver(BruteForceSolver):
    def solve(self, problem, matrices, termination):
        return {"tours": [], "unassigned": []}


class BrokenLoader:
    def __init__(self, message="model missing"):
        self.message = message

    def load(self):
        raise RuntimeError(self.message)


class SlowLoader:
    """Counts loads; blocks inside ``load`` until released."""

    def __init__(self):
        self.loads = 0
        self.entered = threading.Event()
        self.release = threading.Event()

    def load(self):
        self.loads += 1
        self.entered.set()
        self.release.wait(5.0)


@pytest.fixture
def animal_embedder():
    return LookupEmbedder(ANIMAL_TABLE)


@pytest.fixture
def make_collaborators():
    def _make(embedder=None, projector=None, solver=None):
        return Collaborators(
            embedder=embedder or LookupEmbedder(ANIMAL_TABLE),
            projector=projector or FirstAxesProjector(),
            solver=solver or BruteForceSolver(),
        )

    return _make


@pytest.fixture
def codec():
    return DEFAULT_CODEC

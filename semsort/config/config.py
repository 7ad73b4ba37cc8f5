# Simple parameter defaults (extend freely)
DEFAULTS = {
    "location_base": 1000,         # K: minor field range of an encoded location
    "location_max_major": 1000,    # capacity = base * max_major items
    "cost_scale": 10000,           # distance -> integer cost multiplier
    "alignment_penalty": 20000,    # cost for a location with no embedding
    "vehicle_capacity": 1000,      # raised to the item count when smaller
    "shift_start": "2024-01-01T00:00:00Z",
    "profile": "car",
    "max_time": 5,                 # solver wall clock budget (seconds)
    "max_generations": 1000,       # solver iteration budget
    "embedding_model": "mixedbread-ai/mxbai-embed-xsmall-v1",
    "embedding_device": None,
    "umap_n_neighbors": 15,        # clamped to n - 1 at runtime
    "umap_min_dist": 0.1,
    "umap_spread": 1.0,
    "umap_random_state": None,
    "view_radius": 5.0,
    "view_line_width": 2.0,
    "view_label_size": 16.0,
    "view_similarity_threshold": 0.5,
    "runner_timeout": 600.0,
}

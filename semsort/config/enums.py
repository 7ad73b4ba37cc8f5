# Pipeline stages and protocol tags shared across modules

# orchestrator states (in transition order)
STAGE_IDLE      = "Idle"
STAGE_EMBED     = "Embedding"
STAGE_PROJECT   = "Projecting"
STAGE_ASSEMBLE  = "AssemblingProblem"
STAGE_LOCATIONS = "QueryingLocations"
STAGE_MATRIX    = "BuildingMatrix"
STAGE_SOLVE     = "Solving"
STAGE_DECODE    = "Decoding"
STAGE_DONE      = "Done"
STAGE_FAILED    = "Failed"

STAGE_ORDER = (
    STAGE_EMBED,
    STAGE_PROJECT,
    STAGE_ASSEMBLE,
    STAGE_LOCATIONS,
    STAGE_MATRIX,
    STAGE_SOLVE,
    STAGE_DECODE,
)

# human readable progress line per stage
STAGE_MESSAGES = {
    STAGE_EMBED:     "Computing embeddings...",
    STAGE_PROJECT:   "Projecting with UMAP (2D)...",
    STAGE_ASSEMBLE:  "Assembling routing problem...",
    STAGE_LOCATIONS: "Querying routing locations...",
    STAGE_MATRIX:    "Calculating distance matrix...",
    STAGE_SOLVE:     "Solving TSP...",
    STAGE_DECODE:    "Decoding tour...",
}

# collaborator handle lifecycle
INIT_UNINITIALIZED = "uninitialized"
INIT_LOADING       = "loading"
INIT_READY         = "ready"
INIT_FAILED        = "failed"

# protocol message tags
MSG_INIT   = "INIT"
MSG_READY  = "READY"
MSG_SORT   = "SORT"
MSG_STATUS = "STATUS"
MSG_SORTED = "SORTED"
MSG_ERROR  = "ERROR"

MIN_ITEMS = 2

"""Collaborator backends: embedding, projection and routing."""

from .embedder import SentenceTransformerEmbedder
from .handles import Collaborators, default_collaborators
from .projector import UmapProjector, principal_axes_2d
from .solver import VrpCliSolver, termination_config

__all__ = [
    "Collaborators",
    "SentenceTransformerEmbedder",
    "UmapProjector",
    "VrpCliSolver",
    "default_collaborators",
    "principal_axes_2d",
    "termination_config",
]

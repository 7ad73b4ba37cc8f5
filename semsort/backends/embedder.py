"""Sentence embedding backend.

Wraps a ``sentence_transformers.SentenceTransformer`` so the pipeline only
sees ``embed(texts) -> (n, dim) float32 array``.  The model is loaded lazily
on the first :meth:`load` call and reused afterwards.
"""

import logging
from datetime import datetime
from typing import Optional, Sequence

import numpy as np

from ..config.config import DEFAULTS

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder:
    """Mean-pooled, L2-normalized sentence embeddings."""

    def __init__(
        self,
        model_name: str = DEFAULTS["embedding_model"],
        device: Optional[str] = DEFAULTS["embedding_device"],
        batch_size: int = 32,
    ):
        self.model_name = model_name
        self.device = device
        self.batch_size = batch_size
        self._model = None

    @property
    def loaded(self) -> bool:
        return self._model is not None

    def load(self) -> None:
        if self._model is not None:
            return
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError:
            raise ImportError(
                "sentence-transformers is required. Install with: pip install sentence-transformers"
            )

        logger.info(f"Loading embedding model {self.model_name}...")
        start_time = datetime.now()
        self._model = SentenceTransformer(self.model_name, device=self.device)
        elapsed = (datetime.now() - start_time).total_seconds()
        logger.info(f"Embedding model ready in {elapsed:.1f}s")

    def embed(self, texts: Sequence[str]) -> np.ndarray:
        self.load()
        vectors = self._model.encode(
            list(texts),
            batch_size=self.batch_size,
            normalize_embeddings=True,
            convert_to_numpy=True,
            show_progress_bar=False,
        )
        return np.asarray(vectors, dtype=np.float32)

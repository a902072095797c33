"""
Embeddings model abstraction.

The toolkit ships no concrete embeddings backend; applications wrap whatever
model they run locally (CoreML, sentence-transformers, an HTTP endpoint).
"""

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray


class EmbeddingsModel(ABC):
    """
    Abstract base class for text embedding models.

    Attributes:
        model_name: Identifier of the underlying model.
    """

    model_name: str = ""

    @abstractmethod
    async def get_embeddings(self, texts: str | list[str]) -> NDArray[np.float64]:
        """Embed one or more texts and return a float64 array of shape '(n, embedding_size)'."""
        pass

"""Wire response models.

All models are Pydantic v2 models validating raw JSON bodies returned by
the count-capable paged protocol.
"""

from .responses import FeatureCollectionResponse, FeatureCountResponse

__all__ = ["FeatureCollectionResponse", "FeatureCountResponse"]

"""
Document synthesis: presentation and PDF rendering from one export request.
"""
from services.synthesis.images import EmbeddableImage, ImageFetcher, decode_image
from services.synthesis.synthesizer import DocumentSynthesizer

__all__ = [
    "DocumentSynthesizer",
    "EmbeddableImage",
    "ImageFetcher",
    "decode_image",
]

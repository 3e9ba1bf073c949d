from .models import ConversionResult, TranslationJob
from .service import ConversionService
from .app import create_app

__all__ = ["ConversionResult", "ConversionService", "TranslationJob", "create_app"]

"""Engine configuration module.

- **settings.py**: Environment-based settings (Pydantic BaseSettings)
  - Lesson duration bounds, calendar range cap, compliance windows and bands
  - Loaded from .env file via pydantic-settings

Domain constants that are not meant to be tuned per deployment live in
``coachcal.engine.constants``.
"""
from coachcal.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]

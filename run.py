#!/usr/bin/env python3
"""
Run script for the Waveform Video Publisher
"""
import uvicorn

from wavepub.config.settings import settings
from wavepub.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)

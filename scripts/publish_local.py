import asyncio
import os
import sys
from pathlib import Path

# Add project root to path so we can import wavepub
sys.path.append(os.getcwd())

from wavepub.config.settings import settings
from wavepub.domain import AudioSubmission
from wavepub.main import build_pipeline
from wavepub.services import RenderFailure, S3AssetStore, StoreError


async def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/publish_local.py path/to/song.mp3")
        return

    audio_path = Path(sys.argv[1])
    if not audio_path.exists():
        print(f"File '{audio_path}' not found.")
        return

    _, pipeline = build_pipeline(settings, S3AssetStore.from_config(settings.store))
    submission = AudioSubmission(source_path=audio_path, original_filename=audio_path.name)

    print(f"Rendering {audio_path.name} ({pipeline.strategy}-side banners)...")
    try:
        resource = await pipeline.publish(
            submission,
            progress=lambda percent: print(f"\r{percent:5.1f}% done", end="", flush=True),
        )
    except RenderFailure as e:
        print(f"\nRender Error: {e}")
        if e.stderr:
            print(e.stderr)
        return
    except StoreError as e:
        print(f"\nStore Error: {e}")
        return

    print("\n--- Published ---")
    print(resource.model_dump_json(indent=2))
    print("-----------------")


if __name__ == "__main__":
    asyncio.run(main())

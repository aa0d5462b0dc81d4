# scripts/analyze_image.py
import argparse
import asyncio
import base64
import json
import mimetypes
from pathlib import Path
from typing import Optional

from app.core.config import settings
from app.services.evaluator import PhotoEvaluator


def to_data_url(path: Path) -> str:
    mime = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    return f"data:{mime};base64,{base64.b64encode(path.read_bytes()).decode()}"


async def main(path: Path, model: str, evaluator: Optional[PhotoEvaluator] = None):
    evaluator = evaluator or PhotoEvaluator.from_settings(settings)
    evaluator.model = model
    try:
        result = await evaluator.evaluate(to_data_url(path))
        print(json.dumps(result, ensure_ascii=False, indent=2))
    finally:
        await evaluator.client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Evaluate one photo with the fixed rubric")
    parser.add_argument("path", type=Path)
    parser.add_argument("--model", default=settings.OPENAI_MODEL)
    args = parser.parse_args()
    asyncio.run(main(args.path, args.model))

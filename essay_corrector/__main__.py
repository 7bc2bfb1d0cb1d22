import argparse
import asyncio
import json
import logging
import sys

from pydantic import ValidationError

from essay_corrector.client.bootstrap import build_llm
from essay_corrector.core.config import settings
from essay_corrector.core.exceptions import CorrectionException, PromptLoadException, ValidationException
from essay_corrector.models.essay import EssayDraft
from essay_corrector.services.essay_corrector import EssayCorrector
from essay_corrector.services.scoring import score_breakdown
from essay_corrector.utils.prompt_loader import PromptLoader


async def _amain(draft: EssayDraft, loader: PromptLoader) -> int:
    corrector = EssayCorrector(build_llm(), loader)
    try:
        outcome = await corrector.correct(draft)
    except ValidationException as e:
        print(e.message, file=sys.stderr)
        return 2
    except CorrectionException as e:
        print(e.message, file=sys.stderr)
        return 1

    output = {
        "result": outcome.result.model_dump(by_alias=True),
        "score": score_breakdown(outcome.result, draft),
        "timings": outcome.timings,
        "usage": outcome.usage,
    }
    print(json.dumps(output, ensure_ascii=False, indent=2))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Correct an OREO-structured essay draft")
    parser.add_argument("--file", help="Path to an essay draft JSON file (defaults to stdin)")
    parser.add_argument("--prompt-version", default=settings.PROMPT_VERSION, help="Prompt version directory")
    parser.add_argument("--dry-run", action="store_true", help="Print the prompt that would be sent and exit")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        if args.file:
            with open(args.file, "r", encoding="utf-8") as f:
                raw = f.read()
        else:
            raw = sys.stdin.read()
    except OSError as e:
        print(f"Failed to read file: {e}", file=sys.stderr)
        return 2

    try:
        draft = EssayDraft.model_validate_json(raw)
    except ValidationError as e:
        print(f"Invalid essay draft: {e}", file=sys.stderr)
        return 2

    try:
        loader = PromptLoader(version=args.prompt_version)
    except PromptLoadException as e:
        print(e.message, file=sys.stderr)
        return 2

    if args.dry_run:
        corrector = EssayCorrector(llm=None, loader=loader)
        try:
            print(corrector.build_prompt(draft))
        except ValidationException as e:
            print(e.message, file=sys.stderr)
            return 2
        return 0

    return asyncio.run(_amain(draft, loader))


if __name__ == "__main__":
    raise SystemExit(main())

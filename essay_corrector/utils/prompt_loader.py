import json
from pathlib import Path
from typing import Dict, List, Optional, Union

from essay_corrector.core.exceptions import PromptLoadException

PROMPT_FILE = "correction.json"
REQUIRED_SECTIONS = ["role", "guidelines", "rubric", "response_format", "essay_header"]
# 지시문을 조립하는 순서
INSTRUCTION_ORDER = ["role", "guidelines", "rubric", "response_format"]


class PromptLoader:
    """Load and manage the versioned correction instruction."""

    def __init__(self, prompts_dir: Optional[str] = None, version: str = "v1.0.0") -> None:
        """
        Initialize the prompt loader.

        - If `prompts_dir` is None, resolve to the `prompts` directory shipped
          inside the `essay_corrector` package.
        - If `prompts_dir` is provided and not found relative to the CWD,
          also try resolving it relative to the package root.
        """
        package_root = Path(__file__).resolve().parents[1]

        if prompts_dir is None:
            self.prompts_dir: Path = package_root / "prompts"
        else:
            candidate = Path(prompts_dir)
            self.prompts_dir = candidate if candidate.exists() else (package_root / candidate)

        self.version = version
        self._prompts_cache: Dict[str, str] = {}
        self._load_prompts()

    def _load_prompts(self) -> None:
        """Load every prompt section from the versioned directory."""
        json_file = self.prompts_dir / self.version / PROMPT_FILE

        if not json_file.exists():
            raise PromptLoadException(
                f"Required prompt file not found: {json_file}",
                version=self.version,
            )

        try:
            with open(json_file, "r", encoding="utf-8") as file:
                data: Dict[str, Union[str, List[str]]] = json.load(file)
        except (OSError, json.JSONDecodeError) as exc:
            raise PromptLoadException(
                f"Error loading prompts from {json_file}: {exc}", version=self.version
            ) from exc

        for section in REQUIRED_SECTIONS:
            if section not in data:
                raise PromptLoadException(
                    f"Missing section '{section}' in {json_file}", version=self.version
                )

        # 섹션은 문자열 또는 줄 단위 리스트
        for section, value in data.items():
            self._prompts_cache[section] = "\n".join(value) if isinstance(value, list) else str(value)

    def load_prompt(self, section: str) -> str:
        """Load a single prompt section."""
        if section not in self._prompts_cache:
            available = list(self._prompts_cache.keys())
            raise PromptLoadException(
                f"No prompt found for section: '{section}'. Available sections: {available}",
                version=self.version,
            )
        return self._prompts_cache[section]

    def build_instruction(self, compiled_essay: str) -> str:
        """Full text sent to the model: rubric instruction followed by the student's essay."""
        blocks = [self.load_prompt(section) for section in INSTRUCTION_ORDER]
        blocks.append(f"{self.load_prompt('essay_header')}\n{compiled_essay}")
        return "\n\n".join(blocks)

    def get_available_sections(self) -> List[str]:
        return list(self._prompts_cache.keys())

    def reload_prompts(self) -> None:
        """Reload prompts from files (useful for development/testing)."""
        self._prompts_cache.clear()
        self._load_prompts()

"""
Fixed texts used by the delivery pipeline, rendered from Jinja templates.
"""

from pathlib import Path
from jinja2 import Template


TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

PROBLEM_TITLES = {
    "en": "New Problem",
    "ar": "مشكلة جديدة",
}


class PromptLibrary:
    """Renders the onboarding instruction, system prompt and call-to-action."""

    def __init__(self, language: str = "en", call_to_action_url: str = "https://www.ajnee.com"):
        """
        Initialize the prompt library.

        Args:
            language: Language code of the rendered texts ('en' or 'ar')
            call_to_action_url: Link target of the call-to-action message
        """
        self.language = language
        self.call_to_action_url = call_to_action_url
        self.instruction_template = self._load_template("problem_instruction.jinja")
        self.problem_prompt_template = self._load_template("problem_prompt.jinja")
        self.call_to_action_template = self._load_template("call_to_action.jinja")

    def problem_title(self) -> str:
        return PROBLEM_TITLES.get(self.language, PROBLEM_TITLES["en"])

    def problem_instruction(self) -> str:
        """Onboarding message revealed at the start of the problem-definition flow."""
        return self.instruction_template.render(language=self.language).strip()

    def problem_prompt(self) -> str:
        """System instruction sent with every completion of a problem-definition chat."""
        return self.problem_prompt_template.render(language=self.language).strip()

    def call_to_action(self) -> str:
        """Message appended after every ordinary answer."""
        return self.call_to_action_template.render(
            language=self.language,
            url=self.call_to_action_url,
        ).strip()

    def _load_template(self, name: str) -> Template:
        template_path = TEMPLATE_DIR / name
        with open(template_path, 'r', encoding='utf-8') as f:
            template_content = f.read()
        return Template(template_content)

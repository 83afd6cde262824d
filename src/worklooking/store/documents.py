"""Load and save the user's resume and candidature config in the data directory."""

from __future__ import annotations

import json
import logging

from worklooking.models.candidature import CandidatureConfig
from worklooking.models.resume import ResumeDocument
from worklooking.utils.sandbox import SandboxedFileAccessor

logger = logging.getLogger(__name__)

RESUME_FILE = "resume.json"
CONFIG_FILE = "candidature_config.json"


class DocumentStore:
    """JSON files kept at the root of the sandbox."""

    def __init__(self, sandbox: SandboxedFileAccessor):
        self.sandbox = sandbox

    def load_resume(self) -> ResumeDocument | None:
        if not self.sandbox.exists(RESUME_FILE):
            return None
        return ResumeDocument.model_validate_json(self.sandbox.read_text(RESUME_FILE))

    def load_config(self) -> CandidatureConfig | None:
        if not self.sandbox.exists(CONFIG_FILE):
            return None
        return CandidatureConfig.model_validate_json(self.sandbox.read_text(CONFIG_FILE))

    def save_resume(self, resume: ResumeDocument) -> None:
        self.sandbox.write_text(RESUME_FILE, _dumps(resume.to_json_dict()))
        logger.info("Saved %s", RESUME_FILE)

    def save_config(self, config: CandidatureConfig) -> None:
        self.sandbox.write_text(CONFIG_FILE, _dumps(config.model_dump(mode="json")))
        logger.info("Saved %s", CONFIG_FILE)


def _dumps(data: dict) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"

"""A publish collaborator that stages publications into a local directory.

Each module gets `<out>/<module>/` containing the rendered POM and a
`publication.json` describing what a real uploader would push, including
the files the signer has to cover. Secrets are masked in the JSON.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from j_conventions.pom import write_pom
from j_conventions.publication import PublicationDescriptor

logger = logging.getLogger(__name__)


class StagingDirectoryCollaborator:
    def __init__(self, out_dir: Path) -> None:
        self.out_dir = out_dir
        self.staged: list[Path] = []

    def upload(self, descriptor: PublicationDescriptor) -> None:
        module_dir = self.out_dir / descriptor.module
        pom_path = write_pom(descriptor, module_dir)

        manifest = module_dir / "publication.json"
        payload = {**descriptor.model_dump(mode="json"), "files_to_sign": descriptor.files_to_sign()}
        manifest.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")

        target = "<none>"
        if descriptor.repository is not None:
            target = descriptor.repository.url_for(descriptor.gav.version)
        logger.info("Staged %s for %s in %s", descriptor.gav.compact(), target, module_dir)
        self.staged.extend([pom_path, manifest])

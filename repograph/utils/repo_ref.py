"""Parse user-supplied repository references (``owner/repo`` or a GitHub URL)."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict

from repograph.utils.exceptions import InvalidRepositoryError

INVALID_REPO_MESSAGE = "Please enter a valid repository (owner/repo or GitHub URL)"

_GITHUB_URL = re.compile(r"github\.com[/:]([^/\s]+)/([^/\s?#]+)")


class RepoRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_repo_ref(text: str) -> RepoRef:
    """Parse ``owner/repo`` or a URL containing ``github.com/owner/repo``.

    A trailing ``.git`` is stripped from the repository name.
    """
    text = text.strip()
    owner = name = ""

    if "github.com" in text:
        match = _GITHUB_URL.search(text)
        if match:
            owner = match.group(1)
            name = re.sub(r"\.git$", "", match.group(2))
    elif "/" in text:
        parts = text.split("/")
        owner = parts[0].strip()
        name = parts[1].strip()

    if not owner or not name:
        raise InvalidRepositoryError(INVALID_REPO_MESSAGE)
    return RepoRef(owner=owner, name=name)

# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.
"""Source loading for annotated reports"""

from abc import ABC, abstractmethod
from logging import getLogger
from typing import List

from .errors import SourceUnavailable

LOG = getLogger(__name__)


class Loader(ABC):
    """Source of file contents for the pretty-print formatter"""

    @abstractmethod
    def load(self, path: str) -> List[str]:
        """Load the lines of `path`, without line terminators.

        Raises:
            SourceUnavailable: if the file cannot be read.
        """


class FileLoader(Loader):
    """Read sources from the local filesystem"""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def load(self, path: str) -> List[str]:
        LOG.debug("loading source %s", path)
        try:
            with open(path, encoding=self.encoding) as fd:
                text = fd.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise SourceUnavailable(path, str(exc)) from exc
        # str.splitlines() also breaks on form feeds etc., shifting line numbers
        lines = text.split("\n")
        if lines[-1] == "":
            lines.pop()
        return lines

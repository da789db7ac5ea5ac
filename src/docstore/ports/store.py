# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

from abc import ABC, abstractmethod
from typing import Any

from ..domain.models import DocumentStat


class DocumentStorePort(ABC):
    """CRUD capability of a document store addressed by root-relative URIs."""

    @abstractmethod
    def load_document(self, uri: str, default: Any = "") -> Any:
        """Return the decoded document, or `default` when it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def save_document(self, uri: str, document: Any) -> bool:
        """Encode and write `document`; False when no format handler accepted it."""
        raise NotImplementedError

    @abstractmethod
    def write_document(self, uri: str, chunk: str) -> bool:
        """Append `chunk` to the document."""
        raise NotImplementedError

    @abstractmethod
    def drop_document(self, uri: str) -> bool:
        """Delete a document or empty directory; False when it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def stat_document(self, uri: str) -> DocumentStat:
        """Uncached stat, no access check."""
        raise NotImplementedError

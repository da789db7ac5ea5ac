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

from __future__ import annotations

import csv
import io
import json
from typing import Any, List, Mapping, Optional

from ...ports.formats import FormatHandler


class JsonFormat(FormatHandler):
    """Pretty-printed JSON (indent 2); the structured format of the store."""

    @property
    def name(self) -> str:
        return "json"

    def accepts(self, ext: str) -> bool:
        return ext == ".json"

    def decode(self, text: str) -> Any:
        return json.loads(text) if text.strip() else None

    def encode(self, document: Any) -> Optional[str]:
        try:
            return json.dumps(document, ensure_ascii=False, indent=2)
        except (TypeError, ValueError):
            return None


class NdjsonFormat(FormatHandler):
    """One JSON value per line. Documents are lists of records."""

    @property
    def name(self) -> str:
        return "ndjson"

    def accepts(self, ext: str) -> bool:
        return ext in (".jsonl", ".ndjson")

    def decode(self, text: str) -> List[Any]:
        return [json.loads(line) for line in text.splitlines() if line.strip()]

    def encode(self, document: Any) -> Optional[str]:
        if not isinstance(document, (list, tuple)):
            return None
        try:
            lines = [json.dumps(rec, ensure_ascii=False) for rec in document]
        except (TypeError, ValueError):
            return None
        text = "\n".join(lines)
        return text + ("\n" if text else "")


class CsvFormat(FormatHandler):
    """
    Rows of flat dicts. The header is the union of keys in first-seen order,
    so heterogeneous rows still round-trip (missing cells come back as "").
    """

    @property
    def name(self) -> str:
        return "csv"

    def accepts(self, ext: str) -> bool:
        return ext == ".csv"

    def decode(self, text: str) -> List[dict]:
        return [dict(row) for row in csv.DictReader(io.StringIO(text))]

    def encode(self, document: Any) -> Optional[str]:
        if not isinstance(document, (list, tuple)):
            return None
        if not all(isinstance(row, Mapping) for row in document):
            return None
        fieldnames: list[str] = []
        for row in document:
            for key in row:
                if key not in fieldnames:
                    fieldnames.append(key)
        buf = io.StringIO()
        writer = csv.DictWriter(buf, fieldnames=fieldnames, lineterminator="\n")
        writer.writeheader()
        for row in document:
            writer.writerow(row)
        return buf.getvalue()


class TextFormat(FormatHandler):
    """Plain text; only accepts `.txt` (see GenericFormat for the fallback)."""

    @property
    def name(self) -> str:
        return "text"

    def accepts(self, ext: str) -> bool:
        return ext == ".txt"

    def decode(self, text: str) -> str:
        return text

    def encode(self, document: Any) -> Optional[str]:
        if isinstance(document, str):
            return document
        if isinstance(document, bytes):
            return document.decode("utf-8", errors="replace")
        return None


class GenericFormat(TextFormat):
    """Last link of the chain: any extension, text as-is, other values as compact JSON."""

    @property
    def name(self) -> str:
        return "generic"

    def accepts(self, ext: str) -> bool:
        return True

    def encode(self, document: Any) -> Optional[str]:
        text = super().encode(document)
        if text is not None:
            return text
        try:
            return json.dumps(document, ensure_ascii=False)
        except (TypeError, ValueError):
            return None


def default_loaders() -> List[FormatHandler]:
    return [TextFormat(), JsonFormat(), NdjsonFormat(), CsvFormat(), GenericFormat()]


def default_savers() -> List[FormatHandler]:
    return [JsonFormat(), NdjsonFormat(), CsvFormat(), TextFormat(), GenericFormat()]

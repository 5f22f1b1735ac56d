from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import logging

logger = logging.getLogger(__name__)

KNOWLEDGE_HEADER = "【金井産婦人科（院内FAQ要約・抜粋）】"
REFERENCE_HEADER = "【参考URL】"
FALLBACK_TEXT = f"{KNOWLEDGE_HEADER}\n- 情報の読み込みに失敗しました。"


@dataclass(frozen=True)
class FaqRecord:
    category: str
    question: str
    answer: str
    url: str = ""

    @property
    def is_reference_link(self) -> bool:
        return self.answer.startswith(("http://", "https://"))

    def format(self) -> str:
        text = f"Q: {self.question}\nA: {self.answer}"
        if self.category:
            text = f"[{self.category}] {text}"
        return text


@dataclass(frozen=True)
class ClinicKnowledge:
    text: str
    records: tuple[FaqRecord, ...] = ()
    reference_links: tuple[str, ...] = field(default_factory=tuple)
    loaded: bool = True

    @classmethod
    def fallback(cls) -> "ClinicKnowledge":
        return cls(text=FALLBACK_TEXT, loaded=False)


def split_csv_line(line: str) -> list[str]:
    """
    Split one CSV row on commas that are outside double quotes.

    Quote characters only toggle the quoted state and are dropped; every
    field is trimmed.
    """
    columns = []
    current = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            columns.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    columns.append("".join(current).strip())
    return columns


def parse_faq_rows(content: str) -> list[FaqRecord]:
    """Parse the CSV body (category, question, answer, url) into FAQ records."""
    lines = [line.strip() for line in content.split("\n")]
    lines = [line for line in lines if line]
    if len(lines) < 2:
        raise ValueError("knowledge CSV needs a header and at least one row")

    records = []
    for line in lines[1:]:
        columns = split_csv_line(line)
        if len(columns) < 3:
            continue
        category, question, answer = columns[:3]
        url = columns[3] if len(columns) > 3 else ""
        if not question or not answer:
            continue
        records.append(FaqRecord(category=category, question=question, answer=answer, url=url))
    return records


def build_knowledge(records: list[FaqRecord]) -> ClinicKnowledge:
    entries = []
    links = []
    for record in records:
        if record.is_reference_link:
            links.append(f"{record.question}: {record.answer}")
        else:
            entries.append(record.format())

    text = f"{KNOWLEDGE_HEADER}\n\n" + "\n\n".join(entries)
    if links:
        text += f"\n\n{REFERENCE_HEADER}\n" + "\n".join(f"- {link}" for link in links)

    return ClinicKnowledge(text=text, records=tuple(records), reference_links=tuple(links))


def load_clinic_knowledge(path: str | Path) -> ClinicKnowledge:
    """
    Load the clinic FAQ CSV into a knowledge block.

    Never raises: a missing or malformed file yields the fallback block so the
    chat keeps answering with reduced quality.
    """
    try:
        content = Path(path).read_text(encoding="utf-8-sig")
        records = parse_faq_rows(content)
        if not records:
            raise ValueError("knowledge CSV has no usable rows")
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.error(f"Failed to load clinic knowledge from {path}: {e}")
        return ClinicKnowledge.fallback()

    knowledge = build_knowledge(records)
    logger.info(
        f"📚 Loaded {len(records)} FAQ rows "
        f"({len(knowledge.reference_links)} reference links) from {path}"
    )
    return knowledge

"""Prompt construction for chat turns, document ingestion and conversation export.

Everything here is pure string building; nothing performs I/O or raises.
"""

from typing import Literal

from legal_assistant.models.conversation import Message, MessageSender
from legal_assistant.models.knowledge import KnowledgeEntry, KnowledgeEntryContent
from legal_assistant.services.llm.base import CompletionRequest

ExportFormat = Literal["letter", "email"]

DISCLAIMER_RULE = (
    "Always remind the user that your answers are general legal information, not formal "
    "legal advice, and recommend consulting a qualified legal professional for their "
    "specific circumstances."
)

SYSTEM_INSTRUCTIONS = {
    "popia": f"""You are the POPIA Agent, an AI legal assistant specialising in South Africa's
Protection of Personal Information Act 4 of 2013 (POPIA).

Your responsibilities:
- Explain what counts as personal information and how it may lawfully be processed.
- Cover the conditions for lawful processing, consent, data subject rights, security
  safeguards, direct marketing and cross-border transfers.
- Cite the relevant section of the Act where possible, e.g. (POPIA, Act 4 of 2013, Section 11).
- Prefer the knowledge base context supplied with the question when it is relevant.

{DISCLAIMER_RULE}""",
    "rental": f"""You are the Rental Law Agent, an AI legal assistant specialising in South African
residential tenancy law, in particular the Rental Housing Act 50 of 1999.

Your responsibilities:
- Help tenants and landlords understand lease agreements, deposits, notice periods,
  inspections, rent increases, evictions and the role of the Rental Housing Tribunal.
- Cite the relevant section of the Act where possible, e.g. (Rental Housing Act 50 of 1999, Section 5).
- Prefer the knowledge base context supplied with the question when it is relevant.

{DISCLAIMER_RULE}""",
    "consumer": f"""You are the Consumer Protection Agent, an AI legal assistant specialising in
South Africa's Consumer Protection Act 68 of 2008 (CPA).

Your responsibilities:
- Explain consumer rights: fair and honest dealing, plain-language contracts, returns of
  defective goods, warranties, cooling-off periods and unsolicited goods.
- Cite the relevant section of the Act where possible, e.g. (CPA, Act 68 of 2008, Section 56).
- Prefer the knowledge base context supplied with the question when it is relevant.

{DISCLAIMER_RULE}""",
    "general": f"""You are the General Legal Agent, an AI legal assistant that handles general
South African legal queries and triage.

Your responsibilities:
- Give clear, general legal information in plain language.
- When a question is about data privacy, rental housing or consumer rights, say so and
  suggest the POPIA, Rental Law or Consumer Protection agent.
- Ask a short clarifying question when the area of law is unclear.
- Prefer the knowledge base context supplied with the question when it is relevant.

{DISCLAIMER_RULE}""",
}

CONTEXT_START_BANNER = "--- START OF KNOWLEDGE BASE CONTEXT ---"
CONTEXT_END_BANNER = "--- END OF KNOWLEDGE BASE CONTEXT ---"
CONTEXT_SEPARATOR = "\n\n---\n\n"
NO_CONTEXT_SENTINEL = "No additional context is available from the knowledge base for this question."
USER_QUESTION_LABEL = "User Question: "


def get_system_instruction(agent_id: str) -> str:
    """System instruction for agent_id; unknown ids get the general triage instruction."""
    return SYSTEM_INSTRUCTIONS.get(agent_id, SYSTEM_INSTRUCTIONS["general"])


def render_entry(index: int, entry: KnowledgeEntry) -> str:
    content = entry.content
    clauses = "\n".join(f"- {clause.title}: {clause.text}" for clause in content.relevant_clauses)
    return (
        f"Source {index} (from {entry.url}):\n"
        f"Summary: {content.summary}\n"
        f"Key Concepts: {', '.join(content.key_concepts)}\n"
        f"Relevant Clauses:\n{clauses}"
    )


def build_context_block(entries: list[KnowledgeEntry]) -> str:
    if not entries:
        return NO_CONTEXT_SENTINEL
    sources = CONTEXT_SEPARATOR.join(render_entry(i, entry) for i, entry in enumerate(entries, start=1))
    return (
        f"{CONTEXT_START_BANNER}\n"
        "Use the following approved reference material when answering.\n\n"
        f"{sources}\n"
        f"{CONTEXT_END_BANNER}"
    )


def build_chat_request(
    question: str, agent_id: str, entries: list[KnowledgeEntry]
) -> CompletionRequest:
    content = f"{build_context_block(entries)}\n\n{USER_QUESTION_LABEL}{question}"
    return CompletionRequest(content=content, system_instruction=get_system_instruction(agent_id))


INGESTION_SYSTEM_INSTRUCTION = (
    "You are a meticulous legal research assistant that turns legal source material into "
    "structured knowledge base entries. Respond only with JSON matching the supplied schema."
)


def build_ingestion_request(source: str) -> CompletionRequest:
    """Ask for a structured summary of the document at source (a URL or a file name).

    The model is asked to work from what it knows about the source; nothing is fetched.
    """
    content = f"""Analyse the legal document identified below. Based on the source, infer or
extract its content and produce:
- summary: a concise plain-language summary of the document (3-5 sentences);
- key_concepts: the most important legal concepts, terms or obligations it contains;
- relevant_clauses: the clauses or sections most useful to someone seeking legal help,
  each with a short title and the clause text or a faithful paraphrase.

Source: {source}"""
    return CompletionRequest(
        content=content,
        system_instruction=INGESTION_SYSTEM_INSTRUCTION,
        output_schema=KnowledgeEntryContent,
    )


def format_transcript(messages: list[Message], agent_name: str) -> str:
    """Flatten a chat into "You: ..." / "<agent>: ..." lines separated by blank lines."""
    lines = []
    for message in messages:
        prefix = "You" if message.sender == MessageSender.USER else agent_name
        lines.append(f"{prefix}: {message.text}")
    return "\n\n".join(lines)


_EXPORT_INSTRUCTIONS = {
    "letter": (
        "Draft a formal letter based on the conversation below. Use a standard business letter "
        "layout with placeholders such as [Your Name], [Your Address], [Date] and "
        "[Recipient Name]. The letter should set out the user's situation, the relevant legal "
        "points and the advice given, and state clearly what the user is requesting."
    ),
    "email": (
        "Draft a professional email based on the conversation below. Include a subject line, a "
        "greeting with a [Recipient Name] placeholder, a concise account of the user's situation, "
        "the relevant legal points and the advice given, and a polite sign-off with a "
        "[Your Name] placeholder."
    ),
}


def build_export_request(transcript: str, export_format: ExportFormat, agent_name: str) -> CompletionRequest:
    instruction = _EXPORT_INSTRUCTIONS[export_format]
    content = (
        f"{instruction}\n\n"
        f"The conversation took place between the user and the {agent_name}. Summarise the key "
        "legal points and the advice; do not reproduce the chat verbatim. Return only the text "
        f"of the {export_format}.\n\n"
        f"--- CONVERSATION ---\n{transcript}\n--- END OF CONVERSATION ---"
    )
    return CompletionRequest(content=content)

from collections.abc import Sequence

from retrieval_toolkit.conversation_database.data_models.source import Source

# Models comply noticeably less when this wording changes. Several lines end
# with a space; keep them.
SOURCES_INSTRUCTIONS = (
    "Below is information that may or may not be relevant to my request in JSON format. \n"
    "\n"
    "When multiple sources provide correct, but conflicting information (e.g. different definitions), "
    "ALWAYS use sources from files, not websites. \n"
    "\n"
    "If your response uses information from one or more provided sources I provided, your response MUST be "
    "directly followed with a single exaustive LIST OF FILEPATHS AND URLS of ALL referenced sources, in the "
    'format [{"url": "/path/to/referenced/file.pdf"}, {"url": "/path/to/another/referenced/file.docx"}, '
    '{"url": "https://referencedwebsite.com"}, "https://anotherreferencedwebsite.com"}]\n'
    "\n"
    "This list should be the only place where references and sources are addressed, and MUST not be "
    "preceded by a header or a divider.\n"
    "\n"
    "If I did not provide sources, YOU MUST NOT end your response with a list of filepaths and URLs. "
    "If no sources were provided, DO NOT mention the lack of sources.\n"
    "\n"
    "If you did not use the information I provided, YOU MUST NOT end your response with a list of "
    "filepaths and URLs. \n"
    "\n"
    "DO NOT reference sources outside of those provided below. If you did not reference provided sources, "
    "do not mention sources in your response."
)

SOURCE_SEPARATOR = ",\n"


def format_source(source: Source) -> str:
    """Render one source as the two-field literal object the instructions describe."""
    return "{\n" f'\t"text": "{source.text}",\n' f'\t"url": "{source.source}"\n' "}"


def build_query_with_sources(user_query: str, sources: Sequence[Source]) -> str:
    """
    Append the retrieved sources and the citation instructions to a user query.

    Parameters:
    - user_query: The original user message, kept verbatim as the prompt prefix.
    - sources: Non-empty, ordered sources. Local files first, then web pages,
      then attached resources.

    Returns:
    - The augmented prompt handed to the model.
    """
    if not sources:
        raise ValueError("build_query_with_sources requires at least one source")
    sources_text = SOURCE_SEPARATOR.join(format_source(source) for source in sources)
    return f"{user_query}\n\n{SOURCES_INSTRUCTIONS}\n\n{sources_text}"

"""End-to-end tests for the RAG agent with scripted collaborators."""

import pytest
from conftest import ScriptedLLM, ScriptedWebSearch, StaticIndex

from retrieval_toolkit.agents.base import QueryWithContext
from retrieval_toolkit.agents.rag import RAG
from retrieval_toolkit.conversation_database.data_models.source import Citation, Source
from retrieval_toolkit.llms.base import LLMMessage, Roles
from retrieval_toolkit.retriever.merge import SourceMerger
from retrieval_toolkit.utils.prompt import SOURCES_INSTRUCTIONS

SYSTEM_PROMPT = "You are a helpful assistant."


@pytest.mark.asyncio
async def test_answer_with_sources_and_citations(ledger, settings, report_chunks):
    llm = ScriptedLLM(["Revenue grew ", "12%.\n", '[{"url": "/docs/report.pdf"}]'])
    agent = RAG(
        llm=llm,
        merger=SourceMerger(ledger, settings=settings),
        system_prompt=SYSTEM_PROMPT,
        similarity_index=StaticIndex(report_chunks, results=[report_chunks[1]]),
    )
    query = QueryWithContext(query="How did revenue change?", history=[LLMMessage(role=Roles.USER, content="hi")])

    answer = await agent.answer(query)

    assert answer.content == "Revenue grew 12%."
    assert answer.citations == [Citation(url="/docs/report.pdf")]
    assert [s.source for s in answer.sources] == ["/docs/report.pdf"]
    record = ledger.get(query.message_id)
    assert record is not None and list(record.sources) == answer.sources

    conversation = llm.conversations[0]
    assert [m.role for m in conversation] == [Roles.SYSTEM, Roles.USER, Roles.USER]
    assert conversation[-1].content.startswith("How did revenue change?\n\n")
    assert SOURCES_INSTRUCTIONS in conversation[-1].content


@pytest.mark.asyncio
async def test_streamed_snapshots_show_partial_list_until_it_decodes(ledger, settings):
    llm = ScriptedLLM(["Answer.", "\n[", '{"url": "https://one.example"}', "]"])
    web = ScriptedWebSearch(primary=[Source(text="w", source="https://one.example")])
    agent = RAG(
        llm=llm,
        merger=SourceMerger(ledger, web_search=web, settings=settings),
        system_prompt=SYSTEM_PROMPT,
        use_web_search=True,
    )

    snapshots = [answer async for answer in agent.answer_stream(QueryWithContext(query="q"))]

    assert [s.content for s in snapshots] == [
        "Answer.",
        "Answer.\n[",
        'Answer.\n[{"url": "https://one.example"}',
        "Answer.",
    ]
    assert snapshots[-1].citations == [Citation(url="https://one.example")]


@pytest.mark.asyncio
async def test_without_sources_prompt_is_plain_and_brackets_kept(ledger, settings):
    llm = ScriptedLLM(['Use a list like [{"url": "x"}]'])
    agent = RAG(llm=llm, merger=SourceMerger(ledger, settings=settings), system_prompt=SYSTEM_PROMPT)

    answer = await agent.answer(QueryWithContext(query="Show me JSON"))

    assert llm.conversations[0][-1].content == "Show me JSON"
    assert answer.content == 'Use a list like [{"url": "x"}]'
    assert answer.citations == []
    assert answer.sources == []


@pytest.mark.asyncio
async def test_empty_stream_raises(ledger, settings):
    agent = RAG(llm=ScriptedLLM([]), merger=SourceMerger(ledger, settings=settings), system_prompt=SYSTEM_PROMPT)

    with pytest.raises(RuntimeError):
        await agent.answer(QueryWithContext(query="q"))

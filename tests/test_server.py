"""Tests for server tool registration."""

import importlib

import pytest


@pytest.fixture
def server(test_config):  # noqa: ARG001
    return importlib.import_module("lending_library.server")


async def test_all_tools_registered(server):
    tools = await server.mcp.get_tools()

    assert set(tools) == {
        "add_book",
        "get_book",
        "find_books",
        "clear_catalog",
        "checkout_book",
        "return_book",
        "find_lendings",
    }


def test_tool_definitions(server):
    from lending_library.tools import all_tools  # noqa: PLC0415

    for tool in all_tools:
        assert tool["description"]
        assert tool["inputSchema"]["type"] == "object"
        assert callable(tool["handler"])

    schemas = {tool["name"]: tool["inputSchema"] for tool in all_tools}
    assert "nCopies" in schemas["add_book"]["properties"]
    assert "patronId" in schemas["checkout_book"]["properties"]

# Copyright(c) Microsoft Corporation.
# Licensed under the MIT License.

"""Tests for the mcpd-proxy server wiring."""

import json

import mcp.types as types
import pytest
from fakes import FakeBackend, FakeDirectory
from mcp.server import Server

from mcpd_proxy.config import Config
from mcpd_proxy.server import SERVER_NAME, create_server, initialization_options


def _directory() -> FakeDirectory:
    return FakeDirectory(
        {
            "time": FakeBackend(
                tools=[{"name": "get_current_time"}],
                tool_result={"time": "12:00"},
            ),
            "docs": FakeBackend(
                resources=[{"uri": "file:///readme.md", "name": "readme"}],
                templates=[{"uriTemplate": "file:///{path}", "name": "file"}],
                prompts=[{"name": "summarize", "description": "Summarize a doc"}],
            ),
        },
        {"time": "ok", "docs": "ok"},
    )


@pytest.fixture
def server() -> Server:
    return create_server(Config(), client=_directory())


class TestServerCreation:
    """Test that the server is assembled correctly."""

    def test_server_name(self, server: Server) -> None:
        assert server.name == SERVER_NAME

    def test_all_handlers_registered(self, server: Server) -> None:
        for request_type in (
            types.ListToolsRequest,
            types.CallToolRequest,
            types.ListResourcesRequest,
            types.ReadResourceRequest,
            types.ListResourceTemplatesRequest,
            types.ListPromptsRequest,
            types.GetPromptRequest,
            types.PingRequest,
        ):
            assert request_type in server.request_handlers

    def test_initialization_options(self) -> None:
        options = initialization_options()

        assert options.server_name == "mcpd-proxy"
        assert options.capabilities.tools is not None
        assert options.capabilities.resources is not None
        assert options.capabilities.prompts is not None


class TestHandlers:
    """Test requests dispatched through the registered handlers."""

    @pytest.mark.asyncio
    async def test_list_tools(self, server: Server) -> None:
        handler = server.request_handlers[types.ListToolsRequest]

        result = await handler(types.ListToolsRequest(method="tools/list"))

        tools = result.root.tools
        assert [t.name for t in tools] == ["time__get_current_time"]
        assert tools[0].description == "Tool time__get_current_time"
        assert tools[0].inputSchema == {"type": "object", "properties": {}}

    @pytest.mark.asyncio
    async def test_call_tool(self, server: Server) -> None:
        handler = server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="time__get_current_time"),
        )

        result = await handler(request)

        assert result.root.isError is False
        assert json.loads(result.root.content[0].text) == {"time": "12:00"}

    @pytest.mark.asyncio
    async def test_call_tool_with_invalid_name(self, server: Server) -> None:
        handler = server.request_handlers[types.CallToolRequest]
        request = types.CallToolRequest(
            method="tools/call",
            params=types.CallToolRequestParams(name="get_current_time", arguments={}),
        )

        result = await handler(request)

        assert result.root.isError is True
        assert "Invalid tool name format" in result.root.content[0].text

    @pytest.mark.asyncio
    async def test_list_resources(self, server: Server) -> None:
        handler = server.request_handlers[types.ListResourcesRequest]

        result = await handler(types.ListResourcesRequest(method="resources/list"))

        resources = result.root.resources
        assert [r.name for r in resources] == ["docs__readme"]
        assert str(resources[0].uri).startswith("mcpd://docs/")
        assert resources[0].description == "Resource readme from docs server"

    @pytest.mark.asyncio
    async def test_list_resource_templates(self, server: Server) -> None:
        handler = server.request_handlers[types.ListResourceTemplatesRequest]

        result = await handler(
            types.ListResourceTemplatesRequest(method="resources/templates/list")
        )

        templates = result.root.resourceTemplates
        assert [t.name for t in templates] == ["docs__file"]
        assert templates[0].uriTemplate == "file:///{path}"

    @pytest.mark.asyncio
    async def test_list_prompts(self, server: Server) -> None:
        handler = server.request_handlers[types.ListPromptsRequest]

        result = await handler(types.ListPromptsRequest(method="prompts/list"))

        prompts = result.root.prompts
        assert [p.name for p in prompts] == ["docs__summarize"]
        assert prompts[0].description == "Summarize a doc"

    @pytest.mark.asyncio
    async def test_ping(self, server: Server) -> None:
        handler = server.request_handlers[types.PingRequest]

        result = await handler(types.PingRequest(method="ping"))

        assert isinstance(result.root, types.EmptyResult)


def _server_with(bad: FakeBackend, bad_name: str = "bad") -> Server:
    good = FakeBackend(
        tools=[{"name": "echo"}],
        resources=[{"uri": "file:///a.md", "name": "a"}],
        templates=[{"uriTemplate": "file:///{path}", "name": "file"}],
        prompts=[{"name": "greet", "arguments": [{"name": "who"}]}],
    )
    directory = FakeDirectory(
        {"good": good, bad_name: bad}, {"good": "ok", bad_name: "ok"}
    )
    return create_server(Config(), client=directory)


class TestMalformedBackendItems:
    """An item that cannot be represented drops only the server that sent it."""

    @pytest.mark.asyncio
    async def test_invalid_tool_schema(self) -> None:
        server = _server_with(
            FakeBackend(tools=[{"name": "broken", "inputSchema": "not-a-schema"}])
        )
        handler = server.request_handlers[types.ListToolsRequest]

        result = await handler(types.ListToolsRequest(method="tools/list"))

        assert [t.name for t in result.root.tools] == ["good__echo"]

    @pytest.mark.asyncio
    async def test_template_without_uri_template(self) -> None:
        server = _server_with(FakeBackend(templates=[{"name": "broken"}]))
        handler = server.request_handlers[types.ListResourceTemplatesRequest]

        result = await handler(
            types.ListResourceTemplatesRequest(method="resources/templates/list")
        )

        assert [t.name for t in result.root.resourceTemplates] == ["good__file"]

    @pytest.mark.asyncio
    async def test_prompt_argument_without_name(self) -> None:
        server = _server_with(
            FakeBackend(
                prompts=[{"name": "broken", "arguments": [{"description": "who"}]}]
            )
        )
        handler = server.request_handlers[types.ListPromptsRequest]

        result = await handler(types.ListPromptsRequest(method="prompts/list"))

        assert [p.name for p in result.root.prompts] == ["good__greet"]

    @pytest.mark.asyncio
    async def test_resource_uri_that_is_not_a_url(self) -> None:
        # A space in the server id makes mcpd://my server/... an invalid URL.
        server = _server_with(
            FakeBackend(resources=[{"uri": "file:///b.md", "name": "b"}]),
            bad_name="my server",
        )
        handler = server.request_handlers[types.ListResourcesRequest]

        result = await handler(types.ListResourcesRequest(method="resources/list"))

        assert [r.name for r in result.root.resources] == ["good__a"]


class TestResourceUriRoundTrip:
    """Reads of a listed resource reach the backend with its own URI."""

    @pytest.mark.asyncio
    async def test_read_forwards_unnormalized_uri(self) -> None:
        backend = FakeBackend(
            resources=[{"uri": "file:///my file.md", "name": "notes"}],
            contents=[{"uri": "file:///my file.md", "text": "hello"}],
        )
        server = create_server(
            Config(), client=FakeDirectory({"docs": backend}, {"docs": "ok"})
        )

        listed = await server.request_handlers[types.ListResourcesRequest](
            types.ListResourcesRequest(method="resources/list")
        )
        uri = listed.root.resources[0].uri
        result = await server.request_handlers[types.ReadResourceRequest](
            types.ReadResourceRequest(
                method="resources/read",
                params=types.ReadResourceRequestParams(uri=uri),
            )
        )

        assert backend.calls == [("read_resource", "file:///my file.md")]
        assert result.root.contents[0].text == "hello"


class TestSignalHandling:
    """Test signal handling and graceful shutdown functionality."""

    def test_setup_signal_handlers(self) -> None:
        """Test that signal handlers can be set up without errors."""
        import signal

        from mcpd_proxy.server import setup_signal_handlers

        original_sigint = signal.signal(signal.SIGINT, signal.SIG_DFL)
        original_sigterm = signal.signal(signal.SIGTERM, signal.SIG_DFL)

        try:
            setup_signal_handlers()

            current_sigint = signal.signal(signal.SIGINT, signal.SIG_DFL)
            current_sigterm = signal.signal(signal.SIGTERM, signal.SIG_DFL)

            assert current_sigint != signal.SIG_DFL
            assert current_sigterm != signal.SIG_DFL

        finally:
            signal.signal(signal.SIGINT, original_sigint)
            signal.signal(signal.SIGTERM, original_sigterm)

    def test_signal_handler_sets_shutdown_event(self) -> None:
        """Test that signal handler sets the shutdown event."""
        import signal

        from mcpd_proxy.server import shutdown_event, signal_handler

        shutdown_event.clear()
        assert not shutdown_event.is_set()

        signal_handler(signal.SIGINT, None)

        assert shutdown_event.is_set()

        shutdown_event.clear()

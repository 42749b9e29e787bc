"""MCP server exposing the generate_image tool over stdio."""

import asyncio
import logging
import os
import signal
import sys
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from pydantic import ValidationError

from fluximageserver import __version__
from fluximageserver.config import ReplicateConfig
from fluximageserver.models.errors import ErrorCode
from fluximageserver.models.image_responses import ImageGenerationResponse
from fluximageserver.models.requests import GenerationRequest
from fluximageserver.models.responses import GenerationError
from fluximageserver.providers.replicate_provider import ReplicateProvider
from fluximageserver.services.image_service import FALLBACK_MESSAGE, ImageService
from fluximageserver.utils.schema_utils import tool_input_schema

logger = logging.getLogger(__name__)

SERVER_NAME = "flux-image-server"
TOOL_NAME = "generate_image"
TOOL_DESCRIPTION = "Generate an image using the Flux Schnell model from Replicate"


class FluxImageServer:
    """Wires the image service to an MCP server with a single tool."""

    def __init__(self, config: ReplicateConfig, image_service: ImageService | None = None):
        """
        Initialize the server.

        Args:
            config: Replicate settings, loaded once at startup
            image_service: Service override (builds a Replicate-backed one if not provided)
        """
        self.config = config
        self.image_service = image_service or ImageService(
            ReplicateProvider(config),
            model_name=config.model,
        )

        self.server = Server(SERVER_NAME, version=__version__)
        # Registered directly rather than through the call_tool decorator so an
        # McpError reaches the client as a JSON-RPC error, not a tool result.
        self.server.request_handlers[types.ListToolsRequest] = self._handle_list_tools
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool

    def list_tools(self) -> list[types.Tool]:
        """Return the advertised tools."""
        return [
            types.Tool(
                name=TOOL_NAME,
                description=TOOL_DESCRIPTION,
                inputSchema=tool_input_schema(GenerationRequest),
            )
        ]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> types.CallToolResult:
        """
        Invoke a tool by name.

        Args:
            name: Tool name; anything but generate_image is rejected
            arguments: Raw tool arguments

        Returns:
            CallToolResult with an image, or text flagged with isError

        Raises:
            McpError: METHOD_NOT_FOUND for an unknown tool name
        """
        if name != TOOL_NAME:
            raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))

        try:
            request = GenerationRequest.model_validate(arguments if arguments is not None else {})
        except ValidationError as e:
            response = invalid_input_response(e)
            logger.warning(f"🚫 [FluxImageServer] {response.error.message}")
            return to_tool_result(response)

        try:
            response = await self.image_service.generate(request)
        except Exception as e:
            logger.exception("❌ [FluxImageServer] Error generating image")
            return error_result(str(e) or FALLBACK_MESSAGE)

        return to_tool_result(response)

    async def _handle_list_tools(self, req: types.ListToolsRequest) -> types.ServerResult:
        return types.ServerResult(types.ListToolsResult(tools=self.list_tools()))

    async def _handle_call_tool(self, req: types.CallToolRequest) -> types.ServerResult:
        result = await self.call_tool(req.params.name, req.params.arguments)
        return types.ServerResult(result)

    def shutdown(self, sig: signal.Signals | None = None) -> None:
        """
        Flush the transport and exit the process with status 0.

        The stdio reader blocks on stdin in a worker thread that task
        cancellation cannot interrupt, so the process exits directly instead
        of waiting for the client to send another line.
        """
        name = sig.name if sig is not None else "shutdown"
        logger.info(f"👋 [FluxImageServer] {name} received, closing transport")
        try:
            sys.stdout.flush()
        except (OSError, ValueError):
            # stdout already closed by the client
            pass
        logging.shutdown()
        os._exit(0)

    async def run(self) -> None:
        """
        Serve over stdio until the client disconnects or SIGINT/SIGTERM arrives.
        """
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.shutdown, sig)
            except NotImplementedError:
                # Windows event loops do not support signal handlers
                pass

        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info(f"🚀 [FluxImageServer] {SERVER_NAME} {__version__} running on stdio")
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.remove_signal_handler(sig)
                except NotImplementedError:
                    pass


def to_tool_result(response: ImageGenerationResponse) -> types.CallToolResult:
    """Convert a service response into exactly one MCP content item."""
    if response.success and response.image is not None:
        return types.CallToolResult(
            content=[
                types.ImageContent(
                    type="image",
                    data=response.image.data,
                    mimeType=response.image.mime_type,
                )
            ],
            isError=False,
        )

    message = response.error.message if response.error else FALLBACK_MESSAGE
    return error_result(message)


def invalid_input_response(error: ValidationError) -> ImageGenerationResponse:
    """Wrap argument validation errors in a non-retryable INVALID_INPUT response."""
    return ImageGenerationResponse(
        success=False,
        error=GenerationError.from_code(
            ErrorCode.INVALID_INPUT,
            f"Invalid parameters: {format_validation_error(error)}",
            details={"fields": [".".join(str(part) for part in item["loc"]) for item in error.errors()]},
        ),
    )


def error_result(message: str) -> types.CallToolResult:
    """Build a flagged-error tool result carrying a text message."""
    return types.CallToolResult(
        content=[types.TextContent(type="text", text=message)],
        isError=True,
    )


def format_validation_error(error: ValidationError) -> str:
    """Summarize pydantic errors as 'field: message' pairs."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"])
        parts.append(f"{location}: {item['msg']}" if location else item["msg"])
    return "; ".join(parts)

"""
HTTP endpoints for the CodeWire AI proxies.
"""
import logging
from typing import Any, Dict, Optional

from aiohttp import web

from codewire.ai.proxy import LanguageModelClient
from codewire.config import get_config
from codewire.errors import MissingCredentialError, UpstreamError, ValidationError

logger = logging.getLogger(__name__)

LLM_CLIENT = web.AppKey("llm_client", LanguageModelClient)

async def _read_body(request: web.Request) -> Dict[str, Any]:
    """Decode a JSON request body; anything else counts as an empty object."""
    try:
        data = await request.json()
    except (ValueError, UnicodeDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _config_error(e: MissingCredentialError) -> web.Response:
    logger.error(f"AI proxy misconfigured: {e}")
    return web.json_response({'error': str(e), 'code': 'config_error'}, status=500)


async def translate(request: web.Request) -> web.Response:
    body = await _read_body(request)
    client = request.app[LLM_CLIENT]
    try:
        result = await client.translate(body.get('title'), body.get('description'))
    except ValidationError as e:
        return web.json_response({'error': str(e)}, status=400)
    except MissingCredentialError as e:
        return _config_error(e)
    except UpstreamError as e:
        logger.error(f"Translation error: {e}")
        return web.json_response({'error': 'Translation failed'}, status=500)
    return web.json_response(result)


async def ask_ai(request: web.Request) -> web.Response:
    body = await _read_body(request)
    tags = body.get('tags')
    if not isinstance(tags, list):
        tags = None

    client = request.app[LLM_CLIENT]
    try:
        answer = await client.ask_ai(body.get('title'), body.get('body'), tags)
    except ValidationError as e:
        return web.json_response({'error': str(e)}, status=400)
    except MissingCredentialError as e:
        return _config_error(e)
    except UpstreamError as e:
        logger.error(f"AI answer error: {e}")
        return web.json_response({'error': 'AI answer failed'}, status=500)
    return web.json_response({'answer': answer})


@web.middleware
async def cors_middleware(request: web.Request, handler):
    response = await handler(request)
    if request.path.startswith('/api/'):
        response.headers['Access-Control-Allow-Origin'] = '*'
    return response


def create_app(client: Optional[LanguageModelClient] = None) -> web.Application:
    """
    Build the proxy application.

    Args:
        client: Language-model client to use; by default one reading the
            environment credential

    Returns:
        The aiohttp application
    """
    app = web.Application(middlewares=[cors_middleware])
    app.router.add_post('/api/translate', translate)
    app.router.add_post('/api/ask-ai', ask_ai)

    app[LLM_CLIENT] = client if client is not None else LanguageModelClient()

    async def close_client(app: web.Application):
        await app[LLM_CLIENT].close()
    app.on_cleanup.append(close_client)

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None):
    host = host or get_config('server.host', '127.0.0.1')
    port = port or get_config('server.port', 8080)
    logger.info(f"Starting CodeWire AI proxy on {host}:{port}")
    web.run_app(create_app(), host=host, port=port, print=None)

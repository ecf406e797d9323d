import logging
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from chains.covalent import CovalentClient
from core.errors import UpstreamError
from core.gateway import UpstreamGateway

logger = logging.getLogger(__name__)

# ============================================================
# HELPERS
# ============================================================

def _failure(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


def _upstream_call(what: str, failure_message: str, fn: Callable[[], Any]) -> Any:
    """
    Runs one gateway call. UpstreamError becomes a 500 with a generic
    message; the upstream detail only goes to the log.
    """
    try:
        return fn()
    except UpstreamError as e:
        logger.error("Error fetching %s: %s", what, e.to_dict())
        return _failure(failure_message)


def _envelope(gateway: UpstreamGateway, address: str, items: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"address": address, "chain": gateway.chain, "items": items}


def build_gateway(settings: Optional[config.Settings] = None) -> UpstreamGateway:
    s = settings or config.load_settings()
    if not s.api_key:
        logger.warning("COVALENT_API_KEY is not set; upstream calls will be rejected")
    covalent = CovalentClient(
        api_key=s.api_key,
        chain=s.chain,
        base_url=s.base_url,
        timeout=s.request_timeout,
        ttl_seconds=s.cache_ttl,
        max_cache_entries=s.cache_max_entries,
    )
    return UpstreamGateway(covalent, s.wallets)

# ============================================================
# FASTAPI APP
# ============================================================

def create_app(gateway: Optional[UpstreamGateway] = None) -> FastAPI:
    gw = gateway or build_gateway()

    app = FastAPI(title="Whale API Server")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.gateway = gw

    @app.get("/api/health")
    def health():
        return gw.health_check()

    @app.get("/api/whales")
    def whales():
        return [w.to_dict() for w in gw.list_wallets()]

    # Sync handlers: FastAPI runs them in its threadpool, so the blocking
    # requests session does not stall the event loop.
    @app.get("/api/balances/{address}")
    def balances(address: str):
        res = _upstream_call("balances", "Failed to fetch balances", lambda: gw.get_balances(address))
        if isinstance(res, JSONResponse):
            return res
        return _envelope(gw, address, [b.to_dict() for b in res])

    @app.get("/api/transactions/{address}")
    def transactions(address: str):
        res = _upstream_call("transactions", "Failed to fetch transactions", lambda: gw.get_transactions(address))
        if isinstance(res, JSONResponse):
            return res
        return _envelope(gw, address, [t.to_dict() for t in res])

    @app.get("/api/transfers/{address}")
    def transfers(address: str):
        res = _upstream_call("transfers", "Failed to fetch transfers", lambda: gw.get_transfers(address))
        if isinstance(res, JSONResponse):
            return res
        return _envelope(gw, address, res)

    @app.get("/api/analyze/{address}")
    def analyze(address: str):
        res = _upstream_call("analysis", "Failed to analyze whale activity", lambda: gw.get_analysis(address))
        if isinstance(res, JSONResponse):
            return res
        return res.to_dict()

    return app


app = create_app()


def main(settings: Optional[config.Settings] = None) -> None:
    s = settings or config.load_settings()
    config.configure_logging(s.log_level)
    logger.info("🐋 Whale API Server running on http://localhost:%s", s.port)
    uvicorn.run(app, host=s.host, port=s.port)


if __name__ == "__main__":
    main()

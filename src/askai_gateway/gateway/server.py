"""Launch the gateway under uvicorn."""
from __future__ import annotations
import argparse
import os

import uvicorn

from askai_gateway.common.config import load_config
from askai_gateway.common.logging_setup import setup_logging
from askai_gateway.gateway.fastapi_app import create_app

def main() -> None:
    ap = argparse.ArgumentParser(description="Run the AskAI OpenAI-compatible gateway")
    ap.add_argument("--host", default=os.getenv("GATEWAY_HOST", "0.0.0.0"))
    ap.add_argument("--port", type=int, default=int(os.getenv("GATEWAY_PORT", "8000")))
    ap.add_argument("--config", default=None, help="YAML config path (defaults to $GATEWAY_CONFIG)")
    args = ap.parse_args()

    cfg = load_config(args.config)
    setup_logging(cfg.log_level)
    uvicorn.run(create_app(cfg), host=args.host, port=args.port, log_config=None)

if __name__ == "__main__":
    main()

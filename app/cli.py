"""
Command-line launcher for the proxy.

Usage:
    oracle-proxy --port 3000 --oracle-host 192.168.1.100 [--oracle-port 8087]
    python -m app.cli --config ./config.json

Flags override the JSON config file, which overrides the defaults.
"""

import argparse
import os
import sys

import uvicorn


def port_number(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Puerto inválido: {value}")
    if not 0 < port <= 65535:
        raise argparse.ArgumentTypeError(f"Puerto inválido: {value}")
    return port


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oracle-proxy",
        description="Proxy JSON -> SQL Oracle (INSERTs y procedimientos)",
    )
    parser.add_argument("--port", "-p", type=port_number, help="Puerto del servidor proxy")
    parser.add_argument("--host", help="Interfaz donde escucha el proxy")
    parser.add_argument("--oracle-host", help="IP del servidor Oracle")
    parser.add_argument("--oracle-port", type=port_number, help="Puerto del servidor Oracle")
    parser.add_argument("--config", help="Archivo de configuración JSON")
    return parser


def apply_overrides(args: argparse.Namespace):
    """Push CLI flags into the shared settings object and return it."""
    # The config file is read when settings are first created
    if args.config:
        if not os.path.exists(args.config):
            raise FileNotFoundError(f"No existe el archivo de configuración: {args.config}")
        os.environ["CONFIG_FILE"] = args.config

    from app.core.config import settings

    if args.port is not None:
        settings.PROXY_PORT = args.port
    if args.host:
        settings.PROXY_HOST = args.host
    if args.oracle_host:
        settings.ORACLE_HOST = args.oracle_host
    if args.oracle_port is not None:
        settings.ORACLE_PORT = args.oracle_port
    return settings


def main(argv=None):
    args = build_parser().parse_args(argv)

    try:
        config = apply_overrides(args)
    except FileNotFoundError as error:
        print(error, file=sys.stderr)
        sys.exit(1)

    # Import after overrides so the app is built with the final settings
    from app.main import app

    print(f"Servidor iniciado en http://{config.PROXY_HOST}:{config.PROXY_PORT}")
    print(f"Oracle destino: {config.oracle_base_url}")
    uvicorn.run(app, host=config.PROXY_HOST, port=config.PROXY_PORT)


if __name__ == "__main__":
    main()

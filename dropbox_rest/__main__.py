"""CLI entrypoint for the Dropbox REST client."""

import argparse
import logging
import sys
import threading

from cheroot.wsgi import Server as WSGIServer

from .callback import CALLBACK_PATH, CallbackApp
from .config import Settings, load_session_blob, load_settings, save_session_blob
from .entry import Signal
from .errors import DropboxError
from .session import Session


def authorize(settings: Settings, args) -> int:
    session = Session(settings.consumer_key, settings.consumer_secret, ssl=settings.ssl, mode=settings.mode)

    if not args.callback:
        print(f"Visit {session.authorize_url()} to log in to Dropbox. Hit enter when you have done this.")
        input()
        if not session.authorize():
            print("Error: Dropbox did not grant access", file=sys.stderr)
            return 1
        save_session_blob(settings.session_file, session.serialize())
        print("Authorized")
        return 0

    callback_url = f"http://{args.host}:{args.port}{CALLBACK_PATH}"
    app = CallbackApp(session.serialize(), lambda s: save_session_blob(settings.session_file, s.serialize()))
    server = WSGIServer((args.host, args.port), app)
    thread = threading.Thread(target=server.start, daemon=True)
    thread.start()

    print(f"Visit {session.authorize_url(oauth_callback=callback_url)} to log in to Dropbox.")
    print("Press Ctrl+C to abort")
    try:
        app.done.wait()
    except KeyboardInterrupt:
        print("\nAborted")
        return 1
    finally:
        server.stop()

    print("Authorized")
    return 0


def run_command(session: Session, args) -> int:
    if args.command == "account":
        account = session.account()
        print(f"{account.display_name} <{account.email}> (uid {account.uid})")
    elif args.command == "ls":
        listing = session.entry(args.path).list()
        if listing is Signal.NOT_A_DIRECTORY:
            print(f"Error: {args.path} is not a directory", file=sys.stderr)
            return 1
        for entry in listing:
            metadata = entry.cached_metadata
            marker = "/" if metadata.directory else ""
            print(f"{metadata.size or '-':>10}  {entry.path}{marker}")
    elif args.command == "info":
        metadata = session.metadata(args.path, suppress_list=True)
        print(f"path:      {metadata.path}")
        print(f"directory: {metadata.directory}")
        print(f"size:      {metadata.size}")
        print(f"modified:  {metadata.modified}")
    elif args.command == "get":
        data = session.download(args.path)
        with open(args.output or args.path.rstrip("/").split("/")[-1], "wb") as f:
            f.write(data)
    elif args.command == "put":
        metadata = session.upload(args.local, args.remote)
        print(metadata.path)
    elif args.command == "mkdir":
        print(session.create_folder(args.path).path)
    elif args.command == "mv":
        print(session.move(args.source, args.target).path)
    elif args.command == "cp":
        print(session.copy(args.source, args.target).path)
    elif args.command == "rm":
        session.delete(args.path)
    elif args.command == "link":
        print(session.link(args.path))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Dropbox REST client")
    parser.add_argument("--keys", help="JSON file with 'key' and 'secret' (default: environment)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    commands = parser.add_subparsers(dest="command", required=True)

    auth = commands.add_parser("authorize", help="Authorize this client and store the session")
    auth.add_argument("--callback", action="store_true", help="Receive the OAuth redirect on a local server")
    auth.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    auth.add_argument("--port", type=int, default=8082, help="Port to bind (default: 8082)")

    commands.add_parser("account", help="Show account information")
    for name, help_text in (("ls", "List a directory"), ("info", "Show metadata"), ("mkdir", "Create a folder"),
                            ("rm", "Delete a file or folder"), ("link", "Print a sharing link")):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("path", nargs="?" if name == "ls" else None, default="")

    get = commands.add_parser("get", help="Download a file")
    get.add_argument("path")
    get.add_argument("-o", "--output", help="Local file name")

    put = commands.add_parser("put", help="Upload a file into a remote directory")
    put.add_argument("local")
    put.add_argument("remote", nargs="?", default="")

    for name in ("mv", "cp"):
        command = commands.add_parser(name, help="Move a file" if name == "mv" else "Copy a file")
        command.add_argument("source")
        command.add_argument("target")

    return parser


def main():
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s"
    )

    try:
        settings = load_settings(args.keys)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Set DROPBOX_CONSUMER_KEY and DROPBOX_CONSUMER_SECRET or pass --keys", file=sys.stderr)
        sys.exit(1)

    try:
        if args.command == "authorize":
            sys.exit(authorize(settings, args))

        blob = load_session_blob(settings.session_file)
        if blob is None:
            print("Error: not authorized; run 'authorize' first", file=sys.stderr)
            sys.exit(1)
        session = Session.deserialize(blob)
        sys.exit(run_command(session, args))
    except (DropboxError, ValueError, OSError) as e:
        logging.getLogger(__name__).debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

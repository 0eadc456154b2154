"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

from .capture import list_cameras
from .config import configure_logging, load_config
from .render import format_history, format_result
from .session import ScanSession


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="sehati",
        description="صحتي: صوّر ملصق المنتج الغذائي واحصل على تقييم صحي",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="path to a TOML config file",
    )

    sub = parser.add_subparsers(dest="command")

    # cameras
    sub.add_parser("cameras", help="list available cameras")

    # scan
    scan_parser = sub.add_parser("scan", help="capture or load a label image and analyze it")
    scan_parser.add_argument(
        "--image", type=str, default=None, help="use an existing image file"
    )
    scan_parser.add_argument("--json", action="store_true", help="print JSON")

    # history
    hist_parser = sub.add_parser("history", help="show or edit past scans")
    hist_sub = hist_parser.add_subparsers(dest="action")
    hist_sub.add_parser("list", help="list past scans, newest first")
    show_parser = hist_sub.add_parser("show", help="show one past scan")
    show_parser.add_argument("index", type=int)
    show_parser.add_argument("--json", action="store_true", help="print JSON")
    del_parser = hist_sub.add_parser("delete", help="delete one past scan")
    del_parser.add_argument("index", type=int)
    clear_parser = hist_sub.add_parser("clear", help="delete all past scans")
    clear_parser.add_argument(
        "--yes", "-y", action="store_true", help="skip the confirmation prompt"
    )

    # web
    sub.add_parser("web", help="start the browser UI")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    load_dotenv()
    config = load_config(args.config)
    configure_logging(config.logging.level)

    match args.command:
        case "cameras":
            _cmd_cameras()
        case "scan":
            sys.exit(asyncio.run(_cmd_scan(config, args)))
        case "history":
            sys.exit(_cmd_history(config, args))
        case "web":
            _cmd_web(args)


def _cmd_cameras() -> None:
    cameras = list_cameras()
    if not cameras:
        print("لم يتم العثور على كاميرات.")
        return
    print(f"الكاميرات المتاحة: {len(cameras)}")
    for idx in cameras:
        print(f"  كاميرا {idx}")


async def _cmd_scan(config, args) -> int:
    session = ScanSession.from_config(config)
    try:
        if args.image:
            ok = await session.upload_file(args.image)
        else:
            ok = await _capture_from_camera(session)
        if not ok:
            if session.state.error:
                print(session.state.error, file=sys.stderr)
            return 1

        print("🔍 جاري تحليل البيانات...")
        result = await session.analyze()
        if result is None:
            print(session.state.error, file=sys.stderr)
            return 1

        if args.json:
            print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        else:
            print()
            print(format_result(result))
        return 0
    finally:
        session.close()


async def _capture_from_camera(session: ScanSession) -> bool:
    print("📷 جاري تشغيل الكاميرا...")
    if not await session.start_camera():
        return False

    answer = await asyncio.to_thread(
        input, "اضغط Enter لالتقاط الصورة أو q للإلغاء: "
    )
    if answer.strip().lower() == "q":
        session.stop_camera()
        print("تم الإلغاء.")
        return False
    return session.capture_photo()


def _cmd_history(config, args) -> int:
    from .db import LocalStorage
    from .history import HistoryStore

    storage = LocalStorage(config.history.db_path)
    history = HistoryStore(
        storage, key=config.history.key, limit=config.history.limit
    )
    history.load()
    try:
        match args.action:
            case "show":
                try:
                    entry = history[args.index]
                except IndexError:
                    print(f"no history entry {args.index}", file=sys.stderr)
                    return 1
                if args.json:
                    print(json.dumps(entry.to_dict(), ensure_ascii=False, indent=2))
                else:
                    print(format_result(entry))
            case "delete":
                try:
                    removed = history.remove(args.index)
                except IndexError:
                    print(f"no history entry {args.index}", file=sys.stderr)
                    return 1
                print(f"تم حذف: {removed.product_name}")
            case "clear":
                if history.clear(lambda: args.yes or _confirm("هل تريد مسح السجل؟")):
                    print("تم مسح السجل.")
            case _:
                print("📜 سجل عمليات الفحص:")
                print(format_history(history.entries))
        return 0
    finally:
        storage.close()


def _confirm(question: str) -> bool:
    answer = input(f"{question} [y/N]: ")
    return answer.strip().lower() in ("y", "yes", "نعم")


def _cmd_web(args) -> None:
    app_path = Path(__file__).with_name("app.py")
    cmd = [sys.executable, "-m", "streamlit", "run", str(app_path)]
    if args.config:
        cmd += ["--", "--config", args.config]
    raise SystemExit(subprocess.call(cmd))

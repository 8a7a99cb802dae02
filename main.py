"""
Trie Inspector - Command Line Interface

Interactive mode for inserting, importing and scripting trie entries while
watching the key/value table and the trie node hierarchy.
"""

import sys
import argparse
import logging
import traceback
from pathlib import Path
from datetime import datetime

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from trie_inspector.config import Config
from trie_inspector.errors import InspectorError
from trie_inspector.inspector import Inspector
from trie_inspector.modules.renderer import render_result, render_tree

HELP_TEXT = """
📖 Commands:
  insert <key> <value>   Insert hex key/value (0x prefix optional)
  remove <key>           Remove a key (hex)
  remove #<row>          Remove a table row
  get <key>              Read a value from the trie
  load <file>            Replace everything with a genesis JSON file
  run <file>             Run a Python script (names: trie, data, hashing, Buffer)
  mode tree|cluster      Switch chart layout
  xscale <n>             Horizontal chart scale
  yscale <slider>        Vertical chart scale (slider position / 50)
  storage on|off         Show stored trie nodes
  truncate <n>           Shorten table values above n bytes (0 disables)
  show                   Print table, storage nodes and chart
  tree [-v]              Print the chart only (-v adds tooltips)
  root                   Print the current root
  export <file>          Save chart and entries as JSON
  clear                  Remove all entries
  quit                   Exit
"""


def setup_logging(config: Config) -> None:
    """Configure logging with console and file (DEBUG) output."""
    logs_dir = config.LOG_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    log_filename = logs_dir / f"trie_inspector_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(config.LOG_LEVEL)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    file_handler = logging.FileHandler(log_filename, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    logging.info(f"📝 Log file: {log_filename}")


def _parse_switch(text: str) -> bool:
    value = text.strip().lower()
    if value in ("on", "true", "yes", "1"):
        return True
    if value in ("off", "false", "no", "0"):
        return False
    raise ValueError(f"Expected on/off, got: {text}")


def handle_command(inspector: Inspector, line: str) -> bool:
    """
    Execute one command line. Returns False when the session should end.
    """
    parts = line.split()
    command, args = parts[0].lower(), parts[1:]

    if command in ("quit", "exit"):
        return False

    if command == "help":
        print(HELP_TEXT)

    elif command == "insert":
        if len(args) != 2:
            print("Usage: insert <key> <value>")
            return True
        key, value = (a[2:] if a.startswith("0x") else a for a in args)
        inspector.insert_from_text(key, value)
        print(f"✅ Inserted | root: 0x{inspector.last_render.root.hex()}")

    elif command == "remove":
        if len(args) != 1:
            print("Usage: remove <key> | remove #<row>")
            return True
        target = args[0]
        if target.startswith("#"):
            inspector.remove_row(int(target[1:]))
        else:
            inspector.remove_entry(target if target.startswith("0x") else "0x" + target)
        print(f"🗑️  Removed | root: 0x{inspector.last_render.root.hex()}")

    elif command == "get":
        if len(args) != 1:
            print("Usage: get <key>")
            return True
        key = args[0] if args[0].startswith("0x") else "0x" + args[0]
        value = inspector.get(key)
        print(f"0x{value.hex()}" if value else "(not found)")

    elif command == "load":
        if not args:
            print("Usage: load <file>")
            return True
        result = inspector.import_file(args[0])
        print(f"📥 Loaded {result.entry_count} entries | root: 0x{result.root.hex()}")

    elif command == "run":
        if not args:
            print("Usage: run <file>")
            return True
        result = inspector.run_script_file(args[0])
        print(f"✅ Script done | {result.entry_count} entries | root: 0x{result.root.hex()}")

    elif command == "mode":
        inspector.set_layout_mode(args[0].lower() if args else "tree")
        print(f"Layout: {inspector.options.layout_mode.value}")

    elif command == "xscale":
        inspector.set_x_scale(float(args[0]))

    elif command == "yscale":
        inspector.set_y_scale_slider(int(args[0]))

    elif command == "storage":
        inspector.set_show_storage_nodes(_parse_switch(args[0]) if args else True)
        print(f"Storage nodes: {'on' if inspector.options.show_storage_nodes else 'off'}")

    elif command == "truncate":
        inspector.set_truncate_big_values(int(args[0]) if args else 0)

    elif command == "show":
        print(render_result(inspector.render()))

    elif command == "tree":
        result = inspector.render()
        verbose = "-v" in args
        print("\n".join(render_tree(result.hierarchy, result.options.layout_mode, verbose)))

    elif command == "root":
        print(f"0x{inspector.store.root().hex()}")

    elif command == "export":
        filename = args[0] if args else "chart_export.json"
        path = inspector.export_chart(filename)
        print(f"💾 Exported to: {path}")

    elif command == "clear":
        confirm = input("⚠️  Clear all entries? (yes/no): ").strip().lower()
        if confirm == "yes":
            inspector.clear()
            print("✅ Trie cleared")
        else:
            print("Cancelled")

    else:
        print(f"Unknown command: {command} (type 'help')")

    return True


def run_interactive(inspector: Inspector) -> None:
    """Read commands until quit; errors are reported and the session continues."""
    print("\n🚀 Trie Inspector - Interactive Mode")
    print(HELP_TEXT)

    while True:
        try:
            line = input("> ").strip()
            if not line:
                continue
            if not handle_command(inspector, line):
                print("Goodbye!")
                break

        except KeyboardInterrupt:
            print("\nInterrupted. Goodbye!")
            break
        except EOFError:
            break
        except InspectorError as e:
            print(f"❌ {type(e).__name__}: {e}")
        except (ValueError, IndexError, OSError) as e:
            print(f"❌ {e}")
        except Exception as e:
            print(f"\n❌ Error: {e}")
            traceback.print_exc()


def main() -> None:
    """Main entry point with optional import and script before the prompt."""
    parser = argparse.ArgumentParser(
        description="Trie Inspector - Interactive Mode"
    )

    parser.add_argument(
        "--load",
        type=str,
        help="Load a genesis JSON file before starting"
    )
    parser.add_argument(
        "--script",
        type=str,
        help="Run a script file before starting"
    )
    parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Start with an empty trie instead of the well-known keys"
    )

    args = parser.parse_args()

    try:
        config = Config()
        setup_logging(config)

        inspector = Inspector(config, seed=False if args.no_seed else None)
        print(f"✅ Ready | {len(inspector.store)} entries | layout: {inspector.options.layout_mode.value}")

        if args.load:
            try:
                inspector.import_file(args.load)
                print(f"📥 Loaded: {args.load}")
            except InspectorError as e:
                print(f"⚠️  Warning: Failed to load {args.load}: {e}")

        if args.script:
            try:
                inspector.run_script_file(args.script)
                print(f"✅ Ran script: {args.script}")
            except (InspectorError, OSError) as e:
                print(f"⚠️  Warning: Script failed: {e}")

        print(render_result(inspector.render()))
        run_interactive(inspector)

    except Exception as e:
        print(f"\n❌ Fatal error: {e}")
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
cli.py - Render JSON data into an annotated HTML template

Reads an HTML document carrying data-jst-* bindings and a JSON data file,
renders the data and prints the resulting markup.

    jstemplate page.html data.json
    jstemplate page.html data.json --id order-row --templates templates/
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import ConfigLoader, DataLoader, EngineConfig, TemplateLoader
from .rendering import TemplateEngine
from .tree import LxmlTree


def load_document(template_path: str) -> object:
    template_file = Path(template_path)
    if not template_file.exists():
        raise FileNotFoundError(f"Template file not found: {template_path}")
    return LxmlTree.parse_document(template_file.read_text(encoding="utf-8"))


def render(args: argparse.Namespace) -> str:
    """Render according to parsed command line arguments and return the markup."""
    config = ConfigLoader(args.config).load_engine() if args.config else EngineConfig()
    document = load_document(args.template)
    data_file = Path(args.data)
    data = DataLoader(str(data_file.parent)).load(data_file.name)
    loader = TemplateLoader(args.templates) if args.templates else None

    tree = LxmlTree()
    engine = TemplateEngine(tree, config, document=document, loader=loader)

    if args.id:
        handle = engine.clone_template(args.id)
        if handle.node is None:
            raise LookupError(f"Template not found: {args.id}")
        return tree.to_string(handle.process(data))

    engine.render_in_place(data, tree.body_of(document))
    return tree.to_string(document)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Render JSON data into an HTML template annotated with data-jst-* bindings"
    )
    parser.add_argument("template", help="Path to the HTML template document")
    parser.add_argument("data", help="Path to the JSON data file")
    parser.add_argument("--id", help="Render a clone of the template with this id instead of the whole document")
    parser.add_argument("--templates", help="Directory of <id>.html files for templates missing from the document")
    parser.add_argument("--config", help="Directory holding engine.json")
    parser.add_argument("-o", "--output", help="Write the result to this file instead of stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        markup = render(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output:
        Path(args.output).write_text(markup, encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(markup)
    return 0


if __name__ == "__main__":
    sys.exit(main())

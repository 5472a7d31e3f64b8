#!/usr/bin/env python3
"""
ssdl CLI - analysis of systems specification models

Usage:
    ssdl validate <model>                  Check that a model file decodes
    ssdl coverage <model>                  Requirement allocation coverage
    ssdl trace <model>                     Requirement -> element trace links
    ssdl connectivity <model>              Interface endpoint validity and orphans
    ssdl types <model>                     Interface type distribution
    ssdl graph <model>                     Dependency edges and paths
    ssdl conflicts <model>                 Conflicting critical requirements
    ssdl report <model>                    All analyses
    ssdl diagram <model>                   PlantUML diagrams
    ssdl render <model>                    Dependency graph image
    ssdl schema                            JSON schema of the model format
"""

import argparse
import json
import logging
import sys
from typing import Any, List, Optional

from .config import SSDLConfig, config_path, load_config, save_config
from .core.codec import json_schema, load
from .core.models import System

logger = logging.getLogger(__name__)


def _add_model_command(
    subparsers, name: str, help: str, cfg: SSDLConfig, json_flag: bool = True
) -> argparse.ArgumentParser:
    sub = subparsers.add_parser(name, help=help)
    sub.add_argument("model", help="Path to a JSON system model")
    if json_flag:
        sub.add_argument(
            "--json",
            "-j",
            action=argparse.BooleanOptionalAction,
            default=cfg.output_format == "json",
            help="Output as JSON",
        )
    return sub


def _add_recursive(sub: argparse.ArgumentParser, cfg: SSDLConfig) -> None:
    sub.add_argument(
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=cfg.recursive_interfaces,
        help="Include subsystem interfaces",
    )


def build_parser(cfg: SSDLConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ssdl",
        description="ssdl: analysis of systems specification models",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    ssdl validate vehicle.json
    ssdl coverage vehicle.json --json
    ssdl trace vehicle.json --requirement REQ-002
    ssdl graph vehicle.json --from EC-001 --to BC-001 --transitive
    ssdl diagram vehicle.json --kind bdd -o vehicle.puml
        """,
    )
    parser.add_argument("--verbose", "-v", action="count", default=0, help="More logging (-vv for debug)")
    parser.add_argument("--config", help="Config file (default: $SSDL_CONFIG or ~/.ssdl/config.yaml)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    _add_model_command(subparsers, "validate", "Check that a model file decodes", cfg, json_flag=False)
    _add_model_command(subparsers, "coverage", "Requirement allocation coverage", cfg)

    trace_parser = _add_model_command(subparsers, "trace", "Requirement -> element trace links", cfg)
    trace_group = trace_parser.add_mutually_exclusive_group()
    trace_group.add_argument("--requirement", "-r", help="Only elements allocated this requirement")
    trace_group.add_argument("--element", "-e", help="Only requirements allocated to this element")

    for name, help in (
        ("connectivity", "Interface endpoint validity and orphaned elements"),
        ("types", "Interface type distribution"),
    ):
        sub = _add_model_command(subparsers, name, help, cfg)
        _add_recursive(sub, cfg)

    graph_parser = _add_model_command(subparsers, "graph", "Dependency edges, or paths between two elements", cfg)
    graph_parser.add_argument("--from", dest="source", help="Path start element")
    graph_parser.add_argument("--to", dest="target", help="Path end element")
    graph_parser.add_argument("--transitive", "-t", action="store_true", help="Multi-hop paths, not only direct edges")
    graph_parser.add_argument("--max-length", type=int, default=None, help="Max edges per transitive path")
    _add_recursive(graph_parser, cfg)

    _add_model_command(subparsers, "conflicts", "Conflicting critical requirements", cfg)

    report_parser = _add_model_command(subparsers, "report", "All analyses", cfg)
    _add_recursive(report_parser, cfg)

    diagram_parser = _add_model_command(subparsers, "diagram", "PlantUML diagrams", cfg, json_flag=False)
    diagram_parser.add_argument("--kind", "-k", choices=["bdd", "ibd", "req", "all"], default="all")
    diagram_parser.add_argument("--output", "-o", help="Write to file instead of stdout")

    render_parser = _add_model_command(subparsers, "render", "Render dependency graph as image", cfg, json_flag=False)
    render_parser.add_argument("--output", "-o", default="ssdl-graph.png", help="Output file path")
    render_parser.add_argument("--center", "-c", help="Render only the neighborhood of this element")
    render_parser.add_argument("--depth", "-d", type=int, default=1, help="Neighborhood depth")
    render_parser.add_argument(
        "--layout", "-l", choices=["spring", "kamada_kawai", "circular", "shell"], default=cfg.render_layout
    )
    render_parser.add_argument("--figsize", default=cfg.render_figsize, help="Figure size as WxH (e.g., 16x12)")
    _add_recursive(render_parser, cfg)

    subparsers.add_parser("schema", help="Print the JSON schema of the model format")

    config_parser = subparsers.add_parser("config", help="Show the effective configuration")
    config_parser.add_argument("--init", action="store_true", help="Write the current settings to the config file")

    return parser


def _setup_logging(cfg: SSDLConfig, verbose: int) -> None:
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = getattr(logging, str(cfg.log_level).upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    # Peek at --config before building the parser, since config supplies defaults.
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config")
    known, _ = pre.parse_known_args(argv)
    cfg = load_config(known.config)

    parser = build_parser(cfg)
    args = parser.parse_args(argv)
    _setup_logging(cfg, args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    if args.command == "schema":
        print(json.dumps(json_schema(), indent=2))
        return 0
    if args.command == "config":
        return cmd_config(cfg, args)

    system = _load_model(args.model)
    if system is None:
        return 1

    as_json = getattr(args, "json", False)

    if args.command == "validate":
        return cmd_validate(system)
    elif args.command == "coverage":
        return cmd_coverage(system, as_json)
    elif args.command == "trace":
        return cmd_trace(system, args, as_json)
    elif args.command == "connectivity":
        return cmd_connectivity(system, args, as_json)
    elif args.command == "types":
        return cmd_types(system, args, as_json)
    elif args.command == "graph":
        return cmd_graph(system, args, as_json)
    elif args.command == "conflicts":
        return cmd_conflicts(system, as_json)
    elif args.command == "report":
        return cmd_report(system, args, as_json)
    elif args.command == "diagram":
        return cmd_diagram(system, args)
    elif args.command == "render":
        return cmd_render(system, args)

    return 0


def _load_model(path: str) -> Optional[System]:
    try:
        result = load(path)
    except OSError as e:
        print(f"Error reading {path}: {e}", file=sys.stderr)
        return None
    if not result.ok:
        print(f"Invalid model {path}: {result.error}", file=sys.stderr)
        return None
    return result.value


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def _pct(value: float) -> str:
    return f"{value:.2f}%"


def cmd_validate(system: System) -> int:
    """Handle validate command."""
    from .core.walk import iter_elements, iter_requirements

    elements = sum(1 for _ in iter_elements(system))
    requirements = sum(1 for _ in iter_requirements(system))
    print(f"OK: {system.id} ({system.name}), {elements} elements, {requirements} requirements")
    return 0


def cmd_coverage(system: System, as_json: bool) -> int:
    """Handle coverage command."""
    from .analysis import analyze_coverage

    coverage = analyze_coverage(system)
    if as_json:
        _print_json(coverage.to_dict())
        return 0

    print(f"# Requirement coverage of `{system.id}`")
    print("")
    print(f"Elements:          {coverage.total_elements}")
    print(f"With requirements: {coverage.elements_with_requirements}")
    print(f"Coverage:          {_pct(coverage.coverage_percentage)}")
    if coverage.elements_without_requirements:
        print("")
        print(f"## Without requirements ({len(coverage.elements_without_requirements)})")
        for element_id in coverage.elements_without_requirements:
            print(f"- `{element_id}`")
    return 0


def cmd_trace(system: System, args, as_json: bool) -> int:
    """Handle trace command."""
    from .analysis import build_traceability_matrix

    matrix = build_traceability_matrix(system)
    if args.requirement:
        links = matrix.get_elements_for(args.requirement)
    elif args.element:
        links = matrix.get_requirements_for(args.element)
    else:
        links = list(matrix.links)

    if as_json:
        _print_json([link.to_dict() for link in links])
        return 0

    if not links:
        print("No trace links found")
        return 0

    print(f"# Trace links ({len(links)})")
    print("")
    for link in links:
        print(f"- `{link.requirement_id}` -> `{link.element_id}` ({link.element_kind.value})")
    return 0


def cmd_connectivity(system: System, args, as_json: bool) -> int:
    """Handle connectivity command."""
    from .analysis import analyze_connectivity

    result = analyze_connectivity(system, recursive=args.recursive)
    if as_json:
        _print_json(result.to_dict())
        return 0

    print(f"# Connectivity of `{system.id}`")
    print("")
    print(f"Interfaces: {result.valid_interfaces}/{result.total_interfaces} valid")
    print(f"Score:      {_pct(result.connectivity_score)}")
    if result.invalid_interfaces:
        print("")
        print(f"## Invalid interfaces ({len(result.invalid_interfaces)})")
        for interface in result.invalid_interfaces:
            print(f"- `{interface.id}` {interface.source} -> {interface.target}")
    if result.orphaned_elements:
        print("")
        print(f"## Orphaned elements ({len(result.orphaned_elements)})")
        for element_id in result.orphaned_elements:
            print(f"- `{element_id}`")
    return 0


def cmd_types(system: System, args, as_json: bool) -> int:
    """Handle types command."""
    from .analysis import analyze_interface_types

    result = analyze_interface_types(system, recursive=args.recursive)
    if as_json:
        _print_json(result.to_dict())
        return 0

    print(f"# Interface types of `{system.id}` ({result.total_interfaces} interfaces)")
    print("")
    for interface_type, count in result.type_distribution.items():
        print(f"- {interface_type.value}: {count}")
    if result.most_common_type is not None:
        print("")
        print(f"Most common:  {result.most_common_type.value}")
        print(f"Least common: {result.least_common_type.value}")
    print(f"Diversity:    {_pct(result.diversity_score)}")
    return 0


def cmd_graph(system: System, args, as_json: bool) -> int:
    """Handle graph command."""
    from .analysis import build_dependency_graph

    graph = build_dependency_graph(system, recursive=args.recursive)

    if bool(args.source) != bool(args.target):
        print("--from and --to must be given together", file=sys.stderr)
        return 1

    if args.source:
        if args.transitive:
            paths = graph.find_all_paths(args.source, args.target, max_length=args.max_length)
        else:
            paths = graph.find_paths(args.source, args.target)

        if as_json:
            _print_json([[edge.to_dict() for edge in path] for path in paths])
            return 0
        if not paths:
            print(f"No path from {args.source} to {args.target}")
            return 0
        print(f"# Paths from `{args.source}` to `{args.target}` ({len(paths)})")
        print("")
        for path in paths:
            hops = " -> ".join([path[0].source] + [f"{e.target} [{e.interface_id}]" for e in path])
            print(f"- {hops}")
        return 0

    if as_json:
        _print_json(graph.to_dict())
        return 0

    print(f"# Dependency graph of `{system.id}` ({len(graph.nodes)} nodes, {len(graph.edges)} edges)")
    print("")
    for edge in graph.edges:
        print(f"- {edge.source} -> {edge.target} ({edge.interface_type.value}, {edge.interface_id})")
    return 0


def cmd_conflicts(system: System, as_json: bool) -> int:
    """Handle conflicts command."""
    from .analysis import detect_conflicts

    conflicts = detect_conflicts(system)
    if as_json:
        _print_json([c.to_dict() for c in conflicts])
        return 0

    if not conflicts:
        print("No requirement conflicts found")
        return 0

    print(f"# Requirement conflicts ({len(conflicts)})")
    print("")
    for conflict in conflicts:
        print(f"- `{conflict.requirement1}` / `{conflict.requirement2}`: {conflict.description}")
    return 0


def cmd_report(system: System, args, as_json: bool) -> int:
    """Handle report command."""
    from .analysis import Analyzer

    report = Analyzer(system, recursive=args.recursive).report()
    if as_json:
        _print_json(report.to_dict())
        return 0

    types = report.interface_types
    print(f"# Report for `{report.system_id}` ({report.system_name})")
    print("")
    print(f"Coverage:       {_pct(report.coverage.coverage_percentage)} "
          f"({report.coverage.elements_with_requirements}/{report.coverage.total_elements} elements)")
    print(f"Trace links:    {len(report.traceability.links)}")
    print(f"Connectivity:   {_pct(report.connectivity.connectivity_score)} "
          f"({report.connectivity.valid_interfaces}/{report.connectivity.total_interfaces} interfaces)")
    print(f"Orphans:        {len(report.connectivity.orphaned_elements)}")
    print(f"Type diversity: {_pct(types.diversity_score)}")
    print(f"Conflicts:      {len(report.conflicts)}")
    return 0


def cmd_diagram(system: System, args) -> int:
    """Handle diagram command."""
    from .views import DIAGRAMS

    text = DIAGRAMS[args.kind](system)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(text)
        print(f"Wrote {args.output}", file=sys.stderr)
    else:
        print(text)
    return 0


def cmd_render(system: System, args) -> int:
    """Handle render command."""
    from .analysis import build_dependency_graph
    from .visualization import GraphRenderer, parse_figsize

    try:
        figsize = parse_figsize(args.figsize)
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1

    renderer = GraphRenderer(build_dependency_graph(system, recursive=args.recursive))
    try:
        if args.center:
            output = renderer.render_neighborhood(
                args.center, depth=args.depth, output_path=args.output, figsize=figsize, layout=args.layout
            )
        else:
            output = renderer.render(
                args.output, title=f"{system.name} interfaces", figsize=figsize, layout=args.layout
            )
    except ValueError as e:
        print(f"Error rendering: {e}", file=sys.stderr)
        return 1

    print(f"Rendered to: {output}")
    return 0


def cmd_config(cfg: SSDLConfig, args) -> int:
    """Handle config command."""
    if args.init:
        path = save_config(cfg, args.config)
        print(f"Saved to {path}")
        return 0
    print(f"# {config_path(args.config)}")
    for key, value in cfg.to_dict().items():
        print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

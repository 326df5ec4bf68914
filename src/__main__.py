#!/usr/bin/env python3
"""
blade - Template engine for @directive / {{ echo }} markup

Renders one view from a directory of templates to an output file. Templates
are compiled to Python fragments once and cached; later runs only recompile
templates whose source changed.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Template syntax:
    - {{ expression }}          output a Python expression
    - {{-- comment --}}         comment, never output
    - @if / @foreach / @while   control structures, closed by @end...
    - @extends('layout')        render a parent layout around this view
    - @section / @yield         define and output named sections
    - @include / @each          render other views

Usage:
    blade inputdir/ outputdir/ --view home

    Templates are looked up in inputdir/ (view "users.index" is
    inputdir/users/index.blade.html) and the rendered text is written to
    outputdir/index.html.

Examples:
    # Render with parameters from a YAML file
    blade templates/ output/ --view home --dataFile home.yml

    # Share values with every template, write a compile listing
    blade templates/ output/ --view home --share site=Example --listing

    # Verbose output
    blade templates/ output/ --view home -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

import yaml
from chris_plugin import chris_plugin

from .config import appsettings
from .lib import Environment, Loader, BladeError, __version__, LOG, state_connectToLogger
from .lib.lexer import listing_render
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="blade - Template engine compiling @directive markup to Python",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--view", required=True, type=str, help="Logical name of the view to render (e.g. users.index)"
)

parser.add_argument(
    "--dataFile",
    default=None,
    type=str,
    help="YAML file (relative to inputdir) with parameters for the view",
)

parser.add_argument(
    "--outputFile",
    default="index.html",
    type=str,
    help="Name of the rendered file within outputdir",
)

parser.add_argument(
    "--cacheDir",
    default=None,
    type=str,
    help=f"Directory for compiled fragments. Defaults to outputdir/{appsettings.cache_dir}",
)

parser.add_argument(
    "--share",
    action="append",
    default=None,
    metavar="KEY=VALUE",
    help="Share a value with every template (can be repeated)",
)

parser.add_argument(
    "--listing",
    action="store_true",
    default=False,
    help="Also write a highlighted listing of the view and its compiled fragment",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve all file paths.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - cacheOutputdir: Created compiled-fragment directory
            - outputTarget: Path of the rendered output file
            - envOK: True if environment is valid

    Exits:
        1 if the template directory does not exist
    """

    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    if not state.inputdir.is_dir():
        print(f"Error: Template directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"Template directory: {state.inputdir}", level=2)

    if state.cacheDir:
        state.cacheOutputdir = Path(state.cacheDir)
    else:
        state.cacheOutputdir = state.outputdir / appsettings.cache_dir

    state.cacheOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Fragment cache: {state.cacheOutputdir}", level=2)

    state.outputTarget = state.outputdir / state.outputFile
    state.outputTarget.parent.mkdir(parents=True, exist_ok=True)
    LOG(f"Output file: {state.outputTarget}", level=2)

    state.envOK = True
    return state


def data_load(inputstate: ProgramState) -> ProgramState:
    """
    Load view parameters and shared data.

    Args:
        inputstate: Program state with dataFile and share options

    Returns:
        ProgramState with added fields:
            - viewData: Parameters from the YAML data file ({} without one)
            - sharedData: Values from --share key=value pairs

    Exits:
        1 if the data file is missing, is not a YAML mapping, or a share
        pair has no "="
    """

    state = inputstate.copy()

    if state.dataFile:
        data_file = state.inputdir / state.dataFile
        LOG(f"Reading view data from {data_file}", level=1)
        try:
            data = yaml.safe_load(data_file.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            print(f"Error reading data file: {e}", file=sys.stderr)
            sys.exit(1)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            print(f"Error: Data file must hold a mapping, got {type(data).__name__}", file=sys.stderr)
            sys.exit(1)
        state.viewData = data
        LOG(f"Loaded {len(data)} parameter(s)", level=2)

    shared = {}
    for pair in state.share:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            print(f"Error: --share expects KEY=VALUE, got '{pair}'", file=sys.stderr)
            sys.exit(1)
        shared[key] = value
    state.sharedData = shared

    return state


def view_render(inputstate: ProgramState) -> ProgramState:
    """
    Render the requested view and write it to the output file.

    Args:
        inputstate: Program state with resolved paths and loaded data

    Returns:
        ProgramState with added field:
            - renderResult: Dict containing:
                - status: bool (render success)
                - output_file: str (path to the rendered file)
                - characters: int (length of the rendered text)

    Exits:
        1 if the view is missing or fails to render
    """

    state = inputstate.copy()

    LOG(f"Rendering view '{state.view}'...", level=1)

    environment = Environment(Loader.make(str(state.inputdir), str(state.cacheOutputdir)))
    for key, value in state.sharedData.items():
        environment.share(key, value)

    try:
        rendered = environment.make(state.view, state.viewData).get()
    except BladeError as e:
        print(f"Render error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    state.outputTarget.write_text(rendered, encoding="utf-8")
    state.renderResult = {
        "status": True,
        "output_file": str(state.outputTarget),
        "characters": len(rendered),
    }
    LOG(f"Render complete: {len(rendered)} characters", level=2)
    return state


def listing_write(inputstate: ProgramState) -> ProgramState:
    """
    Write a highlighted listing of the view's template and compiled fragment.

    Only runs with --listing. The listing is written next to the output file
    as <outputFile>.listing.html.

    Args:
        inputstate: Program state after view_render

    Returns:
        ProgramState with added field:
            - listingFile: Path of the written listing (None without --listing)
    """

    state = inputstate.copy()
    if not state.listing:
        return state

    loader = Loader.make(str(state.inputdir), str(state.cacheOutputdir))
    source = Path(loader.fullPath_get(state.view)).read_text(encoding="utf-8")
    fragment = loader.compiled_get(state.view)

    state.listingFile = state.outputTarget.with_name(state.outputTarget.name + ".listing.html")
    state.listingFile.write_text(listing_render(state.view, source, fragment), encoding="utf-8")
    LOG(f"Listing written to {state.listingFile}", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display render results to user.

    Args:
        inputstate: Program state with renderResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if renderResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.renderResult:
        print("Error: Render failed", file=sys.stderr)
        sys.exit(1)

    LOG("\n✓ Render successful!", level=1)
    LOG(f"  Output: {state.renderResult['output_file']}", level=1)
    LOG(f"  Characters: {state.renderResult['characters']}", level=1)
    if state.listingFile:
        LOG(f"  Listing: {state.listingFile}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="blade - Template engine",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - render a view from a template directory.

    Orchestrates the render pipeline:
        1. env_check: Validate paths, create cache and output directories
        2. data_load: Read view parameters and shared data
        3. view_render: Render the view and write the output file
        4. listing_write: Optionally write the template/fragment listing
        5. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing templates
        outputdir: Directory where the rendered file will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, data_load, view_render, listing_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature

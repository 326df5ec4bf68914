"""
Program state models and pipeline helper

Defines ProgramState (the CLI state bus), CompileState (the compiler state
bus) and the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field

from .tokens import Token


PS = TypeVar("PS", bound="ProgramState")
S = TypeVar("S")


@dataclass
class ProgramState:
    """
    Central state container for the render pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as rendering progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, view, dataFile, outputFile,
          cacheDir, share, listing
        - env_check: cacheOutputdir, outputTarget, envOK
        - data_load: viewData, sharedData
        - view_render: renderResult
        - listing_write: listingFile
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing template sources
        outputdir: Base output directory for rendered files
        verbosity: Logging verbosity level (1-3)
        view: Logical name of the view to render
        dataFile: Optional YAML parameter file (relative to inputdir)
        outputFile: Rendered output file name (relative to outputdir)
        cacheDir: Optional compiled-fragment cache directory
        share: Repeated key=value pairs shared with every template
        listing: Write a highlighted source/fragment listing
        envOK: Environment validation passed
        cacheOutputdir: Resolved compiled-fragment cache directory
        outputTarget: Resolved rendered output file path
        viewData: Parameters passed to the top-level view
        sharedData: Data shared with all views
        renderResult: Render results (output_file, characters, status)
        listingFile: Path of the written listing, if any
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    view: str = field(default="")
    dataFile: Optional[str] = field(default=None)
    outputFile: str = field(default="index.html")
    cacheDir: Optional[str] = field(default=None)
    share: List[str] = field(default_factory=list)
    listing: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    cacheOutputdir: Path = field(default=Path("/"))
    outputTarget: Path = field(default=Path("/"))
    viewData: Dict[str, Any] = field(default_factory=dict)
    sharedData: Dict[str, Any] = field(default_factory=dict)
    renderResult: Optional[Dict] = field(default=None)
    listingFile: Optional[Path] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the render pipeline.

        Args:
            options: Parsed CLI arguments (view, dataFile, etc.)
            inputdir: Directory containing template sources
            outputdir: Directory for rendered output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        import dataclasses

        options_dict = vars(options)
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # argparse leaves unset append-options as None
        filtered_options = {
            k: v for k, v in options_dict.items() if k in valid_fields and v is not None
        }

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


@dataclass
class CompileState:
    """
    State carried through the compiler's named steps.

    Attributes:
        source: Raw template text
        name: Optional logical view name (used in log messages only)
        tokens: Token stream (filled by the tokenize step)
        fragment: Compiled Python fragment (filled by the emit step)
    """
    source: str
    name: Optional[str] = None
    tokens: List[Token] = field(default_factory=list)
    fragment: str = ""

    def copy(self) -> "CompileState":
        """Shallow copy with its own token list"""
        return CompileState(
            source=self.source,
            name=self.name,
            tokens=list(self.tokens),
            fragment=self.fragment,
        )


def pipeline(initial_state: S, *stages: Callable[[S], S]) -> S:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (state) -> state that receives the output of
    the previous stage and returns a new state.

    Args:
        initial_state: Starting state (ProgramState or CompileState)
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final state after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            data_load,
            view_render,
            results_report
        )

    This is equivalent to:
        results_report(view_render(data_load(env_check(initial_state))))

    But reads left-to-right instead of inside-out.
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)

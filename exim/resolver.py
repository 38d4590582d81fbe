"""
Turn command line arguments into a conversion request.
"""
import os
from dataclasses import dataclass
from enum import Enum

from .binary_file import PointerWidth
from .errors import UsageError


class Mode(Enum):
    """Conversion direction."""
    EXPORT = "export"
    IMPORT = "import"


@dataclass(frozen=True)
class ConversionRequest:
    """Everything needed to convert one file."""
    mode: Mode
    input_path: str
    output_path: str
    pointer_width: PointerWidth = PointerWidth.SHORT
    legacy_envelope: bool = False


def resolve_mode(export, import_):
    """
    Select the conversion direction from the mode flags.

    :param bool export: -e/--export was given
    :param bool import_: -i/--import was given
    :raises UsageError: If zero or both flags were given
    """
    if not export and not import_:
        raise UsageError("No mode detected.")
    if export and import_:
        raise UsageError("Ambiguous mode: both export and import were requested.")
    return Mode.EXPORT if export else Mode.IMPORT


def prepare_output_directory(output_path):
    """
    Create the directory of the output file if needed.

    :return bool: True if a directory was created
    """
    output_directory = os.path.dirname(output_path)
    if not output_directory or os.path.isdir(output_directory):
        return False
    os.makedirs(output_directory)
    print("Note: Created a directory for the output file.")
    return True


def resolve_request(args):
    """
    Validate parsed arguments and build the conversion request.

    The output directory is created when missing, and is kept even if the
    conversion fails later.

    :param argparse.Namespace args: Arguments from cli.parse_inputs
    :return ConversionRequest: Validated request
    :raises UsageError: On a missing or ambiguous mode, a wrong number of
        paths or a missing input file
    """
    mode = resolve_mode(args.export, args.import_)
    if len(args.paths) != 2:
        raise UsageError(
            "Wrong number of arguments.\n"
            "You may be missing one or both of the paths, "
            "or have supplied extraneous arguments."
        )
    input_path, output_path = args.paths
    if not os.path.isfile(input_path):
        raise UsageError("The input file does not exist.", show_usage=False)
    prepare_output_directory(output_path)
    return ConversionRequest(
        mode=mode,
        input_path=input_path,
        output_path=output_path,
        pointer_width=PointerWidth.LONG if args.long else PointerWidth.SHORT,
        legacy_envelope=getattr(args, "legacy_envelope", False),
    )

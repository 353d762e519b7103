"""
Command handlers for the Xbox disc image extraction utility.
"""

from .constants import BUFFER_SIZE, SYSTEM_UPDATE_DIR
from .directory import STRATEGY_TREE
from .exceptions import XisoError
from .extract import ExtractionEngine
from .formatter import OutputFormatter
from .image import XisoImage
from .logging_config import get_logger
from .sinks import open_target
from .utils import default_output_path

logger = get_logger('commands')


def cmd_list(args, formatter: OutputFormatter) -> int:
    """Handle list mode."""
    strategy = getattr(args, 'strategy', STRATEGY_TREE)

    try:
        with XisoImage(args.image, strategy=strategy) as image:
            logger.debug("%s layout, data region at %#x",
                         image.header.variant, image.root_offset)
            formatter.list_tree(image.root, args.image)
        return 0

    except XisoError as e:
        formatter.error(str(e))
        return 1
    except OSError as e:
        formatter.error(f"Filesystem error: {e}")
        return 1


def cmd_extract(args, formatter: OutputFormatter) -> int:
    """Handle extract mode."""
    destination = getattr(args, 'out', None) or default_output_path(args.image)
    strategy = getattr(args, 'strategy', STRATEGY_TREE)
    chunk_size = getattr(args, 'chunk_size', BUFFER_SIZE)
    exclude = SYSTEM_UPDATE_DIR if getattr(args, 'skip_update', False) else None

    try:
        with XisoImage(args.image, strategy=strategy) as image:
            if not formatter.json_mode:
                print(f"Extracting content of {args.image} to {destination}")

            with open_target(destination) as target:
                target.sink.make_root(target.root)

                engine = ExtractionEngine(image, target.sink, chunk_size=chunk_size,
                                          progress=formatter.progress)
                engine.extract(image.root, target.root, exclude=exclude)

            formatter.extraction_summary(engine.stats, args.image, destination)
        return 0

    except XisoError as e:
        formatter.error(str(e))
        return 1
    except OSError as e:
        formatter.error(f"Filesystem error: {e}")
        return 1

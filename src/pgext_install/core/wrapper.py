import logging
from collections import Counter
from collections.abc import Sequence

logger = logging.getLogger(__name__)

PREAMBLE = '#include "postgres.h"\n#include "fmgr.h"\n\nPG_MODULE_MAGIC;\n\n'


def registration_line(function_name: str) -> str:
    return f"PG_FUNCTION_INFO_V1({function_name});\n\n"


def generate_wrapper(function_names: Sequence[str]) -> str:
    """Render the C module that registers each native function with the server.

    Names are emitted in the given order; an empty sequence yields the preamble only.
    """
    duplicates = sorted(name for name, count in Counter(function_names).items() if count > 1)
    if duplicates:
        # kept as-is: the linker reports the clash with the exact symbol
        logger.warning("Native function(s) declared more than once: %s", ", ".join(duplicates))

    return PREAMBLE + "".join(registration_line(name) for name in function_names)

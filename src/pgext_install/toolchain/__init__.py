from pgext_install.toolchain.compiler import (
    compile_object,
    link_shared_library,
    split_extra_flags,
    write_generated_source,
)
from pgext_install.toolchain.deploy import deploy_extension
from pgext_install.toolchain.metadata import (
    parse_control_file,
    render_control_file,
    write_extension_metadata,
)
from pgext_install.toolchain.pg_config import PgConfigHostLayout, StaticHostLayout
from pgext_install.toolchain.process import run_command

__all__ = [
    "PgConfigHostLayout",
    "StaticHostLayout",
    "compile_object",
    "deploy_extension",
    "link_shared_library",
    "parse_control_file",
    "render_control_file",
    "run_command",
    "split_extra_flags",
    "write_extension_metadata",
    "write_generated_source",
]

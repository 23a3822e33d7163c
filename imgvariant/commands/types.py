"""
Types command for imgvariant CLI.
"""

import sys

import click

from imgvariant.catalog import index_provider_from_config
from imgvariant.config import load_config, validate_config
from imgvariant.errors import ImgVariantError


def _dimensions(spec) -> str:
    parts = []
    if spec.width or spec.height:
        parts.append(f"{spec.width or '?'}x{spec.height or '?'}")
    if spec.max_width or spec.max_height:
        parts.append(f"max {spec.max_width or '-'}x{spec.max_height or '-'}")
    if getattr(spec, "aspect_ratio", None):
        parts.append(f"ratio {spec.aspect_ratio:g}")
    return ", ".join(parts) or "original size"


class TypesCommand:
    """List image types and their linked profiles."""

    def __call__(self):
        config = load_config()
        error = validate_config(config, require_storage=False)
        if error:
            click.echo(f"Configuration error: {error}", err=True)
            sys.exit(1)

        try:
            index = index_provider_from_config(config).get()
        except (ImgVariantError, OSError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)

        for image_type in index.list_types():
            click.echo(
                f"\n🖼  {image_type.image_type_name} (id {image_type.id}, "
                f"{image_type.file_type}, {_dimensions(image_type)})"
            )
            for profile in index.list_profiles(image_type):
                flags = []
                if profile.pregenerate:
                    flags.append("pregenerate")
                if profile.has_webp:
                    flags.append("webp")
                line = f"  📄 {profile.image_profile_name} [{profile.file_type}] {_dimensions(profile)}"
                if flags:
                    line += f" ({', '.join(flags)})"
                click.echo(line)

        click.echo(f"\nTotal: {len(index.types_by_id)} image types, {len(index.profiles_by_id)} profiles")

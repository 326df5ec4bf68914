"""
Application settings and configuration

Uses pydantic-settings for type-safe configuration via environment variables.
All settings use BLADE_ prefix (e.g., BLADE_TEMPLATE_EXTENSION=.html).

Settings can also be loaded from a .env file in the project root.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application configuration via environment variables.

    Environment variables use BLADE_ prefix.

    Examples:
        BLADE_TEMPLATE_EXTENSION=.blade.txt
        BLADE_CACHE_DIR=/tmp/blade-cache
        BLADE_RAW_PREFIX=text:
    """

    model_config = SettingsConfigDict(
        env_prefix="BLADE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Template store configuration
    template_extension: str = Field(
        default=".blade.html",
        description="Suffix appended to a logical view name to find its source file",
    )

    cache_dir: str = Field(
        default=".blade-cache",
        description="Directory holding compiled fragments (relative paths resolve against the output dir)",
    )

    path_prefix: str = Field(
        default="path: ",
        description="View names starting with this prefix are literal file paths",
    )

    namespace_delimiter: str = Field(
        default="::",
        description="Separator between a registered namespace and the view name",
    )

    default_namespace: str = Field(
        default="*",
        description="Key of the default template path",
    )

    # Composition configuration
    raw_prefix: str = Field(
        default="raw|",
        description="Prefix marking an @each empty fallback as literal text instead of a view name",
    )

    parent_placeholder: str = Field(
        default="@parent",
        description="Placeholder in section content replaced by content appended later",
    )

    # Compilation configuration
    fragment_indent: str = Field(
        default="    ",
        description="Indentation unit used for blocks in compiled fragments",
    )

    # Logging configuration
    log_format: str = Field(
        default="<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | "
                "<cyan>{name}:{line}</cyan> - <level>{message}</level>",
        description="loguru format for LOG() records written to stderr",
    )

    def viewFile_make(self, view: str) -> str:
        """
        Map a dotted logical view name to its relative source file name.

        Args:
            view: Logical view name (e.g., "layouts.master")

        Returns:
            Relative file name (e.g., "layouts/master.blade.html")

        Example:
            >>> settings = AppSettings()
            >>> settings.viewFile_make('admin.users.index')
            'admin/users/index.blade.html'
        """
        return view.replace('.', '/') + self.template_extension

    def rawText_extract(self, value: str) -> str | None:
        """
        Extract literal text from an @each empty fallback.

        Args:
            value: Fallback string given to @each

        Returns:
            Text after the raw prefix, or None if value names a view

        Example:
            >>> settings = AppSettings()
            >>> settings.rawText_extract('raw|No posts yet')
            'No posts yet'
            >>> settings.rawText_extract('posts.empty') is None
            True
        """
        if not value.startswith(self.raw_prefix):
            return None
        return value[len(self.raw_prefix):]


# Singleton instance - import this in your code
appsettings = AppSettings()

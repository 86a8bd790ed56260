"""Configuration management for the DOM serializer."""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from llm_dom_serializer.core.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


class SerializerConfig(BaseModel):
    """Serialization pipeline configuration."""

    enable_paint_order_filtering: bool = Field(
        default=True,
        description="Remove elements fully occluded by later-painted elements"
    )
    enable_transparency_filtering: bool = Field(
        default=True,
        description="Treat low-opacity or transparent elements as not visible during paint order filtering"
    )
    enable_bounding_box_filtering: bool = Field(
        default=True,
        description="Remove descendants contained in a propagating ancestor's bounds"
    )
    enable_compound_components: bool = Field(
        default=True,
        description="Attach virtual sub-controls to native widgets"
    )
    opacity_threshold: float = Field(
        default=0.8,
        ge=0.0,
        le=1.0,
        description="Elements with opacity below this value count as transparent"
    )
    containment_threshold: float = Field(
        default=0.99,
        gt=0.0,
        le=1.0,
        description="Fraction of a child's area that must overlap its context to count as contained"
    )
    min_element_size: float = Field(
        default=5,
        ge=0,
        description="Elements with area below min_element_size^2 are dropped"
    )
    max_element_size: float = Field(
        default=10000,
        gt=0,
        description="Elements with area above max_element_size^2 are dropped"
    )
    max_interactive_elements: int = Field(
        default=1000,
        ge=0,
        description="Maximum number of interactive indices assigned per call"
    )

    @classmethod
    def from_env(cls) -> "SerializerConfig":
        """Create config from environment variables."""
        try:
            return cls(
                enable_paint_order_filtering=_env_bool("DOM_ENABLE_PAINT_ORDER", True),
                enable_transparency_filtering=_env_bool("DOM_ENABLE_TRANSPARENCY", True),
                enable_bounding_box_filtering=_env_bool("DOM_ENABLE_BBOX", True),
                enable_compound_components=_env_bool("DOM_ENABLE_COMPOUND", True),
                opacity_threshold=float(os.getenv("DOM_OPACITY_THRESHOLD", "0.8")),
                containment_threshold=float(os.getenv("DOM_CONTAINMENT_THRESHOLD", "0.99")),
                min_element_size=float(os.getenv("DOM_MIN_ELEMENT_SIZE", "5")),
                max_element_size=float(os.getenv("DOM_MAX_ELEMENT_SIZE", "10000")),
                max_interactive_elements=int(os.getenv("DOM_MAX_INTERACTIVE_ELEMENTS", "1000")),
            )
        except (ValueError, ValidationError) as e:
            raise ConfigurationError("Invalid serializer configuration", details=str(e)) from e


class IframeConfig(BaseModel):
    """Iframe expansion configuration."""

    max_iframe_depth: int = Field(
        default=5,
        ge=0,
        description="Maximum iframe nesting depth that is expanded"
    )
    min_iframe_size: float = Field(
        default=100,
        ge=0,
        description="Iframes narrower or shorter than this are not expanded"
    )
    enable_cross_origin: bool = Field(
        default=True,
        description="Expand iframes whose origin differs from the page"
    )
    max_iframes_per_page: int = Field(
        default=20,
        ge=0,
        description="Maximum number of iframes expanded in one traversal"
    )

    @classmethod
    def from_env(cls) -> "IframeConfig":
        """Create config from environment variables."""
        try:
            return cls(
                max_iframe_depth=int(os.getenv("DOM_MAX_IFRAME_DEPTH", "5")),
                min_iframe_size=float(os.getenv("DOM_MIN_IFRAME_SIZE", "100")),
                enable_cross_origin=_env_bool("DOM_ENABLE_CROSS_ORIGIN", True),
                max_iframes_per_page=int(os.getenv("DOM_MAX_IFRAMES_PER_PAGE", "20")),
            )
        except (ValueError, ValidationError) as e:
            raise ConfigurationError("Invalid iframe configuration", details=str(e)) from e


class Config(BaseModel):
    """Main configuration container."""

    serializer: SerializerConfig = Field(default_factory=SerializerConfig)
    iframe: IframeConfig = Field(default_factory=IframeConfig)

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Log file path"
    )
    json_logs: bool = Field(
        default=False,
        description="Emit JSON formatted logs"
    )

    @classmethod
    def from_env(cls) -> "Config":
        """Create complete config from environment variables."""
        return cls(
            serializer=SerializerConfig.from_env(),
            iframe=IframeConfig.from_env(),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=os.getenv("LOG_FILE"),
            json_logs=_env_bool("LOG_JSON", False),
        )

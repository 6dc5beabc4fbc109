"""
Raw template definition shapes.

Definitions arrive as JSON-compatible data from files or request handlers;
these pydantic models check their shape before the template model is built.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class StyleDefinition(BaseModel):
    """Named visual attributes as written in a definition"""
    based_on: Optional[str] = Field(None, description="Parent style name")
    font_family: Optional[str] = None
    font_size: Optional[float] = Field(None, gt=0)
    font_weight: Optional[str] = None
    font_style: Optional[str] = None
    color: Optional[str] = None
    line_spacing: Optional[float] = Field(None, gt=0)
    paragraph_spacing: Optional[float] = Field(None, ge=0)
    margin_top: Optional[float] = Field(None, ge=0)
    margin_bottom: Optional[float] = Field(None, ge=0)
    margin_left: Optional[float] = Field(None, ge=0)
    margin_right: Optional[float] = Field(None, ge=0)
    page_size: Optional[str] = Field(None, description="A4, Letter, ...")
    orientation: Optional[str] = Field(None, description="portrait or landscape")


class SectionDefinition(BaseModel):
    """A section node; subsections nest recursively"""
    id: str = Field(..., min_length=1)
    title: str = ""
    content: str = ""
    required: bool = False
    order: int = Field(..., description="Sibling sort key, unique among siblings")
    style: str = "default"
    subsections: List["SectionDefinition"] = Field(default_factory=list)


class TemplateDefinition(BaseModel):
    """Root of a document template definition"""
    name: str = Field(..., min_length=1)
    description: str = ""
    version: str = "1.0.0"
    template_type: str = "custom"
    sections: List[SectionDefinition] = Field(default_factory=list)
    placeholders: Dict[str, str] = Field(default_factory=dict, description="name -> kind")
    styles: Dict[str, StyleDefinition] = Field(default_factory=dict)
    rtl: bool = False
    default_language: str = "he"
    supported_languages: List[str] = Field(default_factory=lambda: ["he", "ru"])


SectionDefinition.model_rebuild()

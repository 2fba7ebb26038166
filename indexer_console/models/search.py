"""
Search filter state and result models
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Dict, Tuple

PAGE_SIZES = (15, 50, 100, 200)

# Fields whose change does not send the user back to page 1
PAGING_FIELDS = frozenset({'page', 'page_size'})


class SearchFilterState(BaseModel):
    """
    Immutable filter state of the search view
    
    Use with_changes() to derive a new state; it keeps the page invariant
    (any change outside page/page_size goes back to page 1).
    """
    model_config = ConfigDict(frozen=True)
    
    page: int = Field(default=1, ge=1)
    page_size: int = 15
    search: str = ""
    incluirVencidos: str = "0"
    soloVigentes: Optional[str] = None
    objeto: str = ""
    agencia: str = ""
    pais: str = ""
    rubro: str = ""
    apertura_fr: str = ""  # YYYY-MM-DD
    apertura_to: str = ""  # YYYY-MM-DD
    user_tag_ids: Tuple[int, ...] = ()
    filter_mode: str = "all"
    
    @field_validator('page_size')
    @classmethod
    def check_page_size(cls, v):
        if v not in PAGE_SIZES:
            raise ValueError(f"page_size must be one of {PAGE_SIZES}")
        return v
    
    @field_validator('user_tag_ids', mode='before')
    @classmethod
    def to_tuple(cls, v):
        if v is None:
            return ()
        return tuple(v)
    
    def with_changes(self, **changes) -> "SearchFilterState":
        """
        Return a new state with the given fields replaced
        
        Raises:
            ValueError: Unknown field name or invalid value
        """
        unknown = set(changes) - set(type(self).model_fields)
        if unknown:
            raise ValueError(f"Unknown filter fields: {sorted(unknown)}")
        
        data = self.model_dump()
        data.update(changes)
        new_state = type(self).model_validate(data)
        
        changed = [name for name in type(self).model_fields
                   if getattr(new_state, name) != getattr(self, name)]
        if any(name not in PAGING_FIELDS for name in changed) and new_state.page != 1:
            data['page'] = 1
            new_state = type(self).model_validate(data)
        return new_state
    
    def changed_fields(self, other: "SearchFilterState") -> List[str]:
        """Names of the fields that differ from another state"""
        return [name for name in type(self).model_fields
                if getattr(other, name) != getattr(self, name)]


class TagModel(BaseModel):
    """Tag attached to a publication"""
    id: int
    descripcion: str


class Publication(BaseModel):
    """Read-only projection of an indexed publication"""
    model_config = ConfigDict(extra="allow")
    
    id: int
    scraper: Optional[int] = None
    referencia: Optional[str] = None
    objeto: Optional[str] = None
    agencia: Optional[str] = None
    oficina: Optional[str] = None
    link: Optional[str] = None
    apertura: Optional[str] = None
    cierre: Optional[str] = None
    pais: Optional[str] = None
    pais_nombre: Optional[str] = None
    pais_id: Optional[int] = None
    monto: Optional[float] = None
    divisaSimboloISO: Optional[str] = None
    tags: Optional[List[TagModel]] = None
    tag_ids: Optional[List[int]] = None
    tipo_licit_ids: Optional[Dict[str, Optional[int]]] = None
    vigente: Optional[bool] = None


class SearchResultPage(BaseModel):
    """One page of search results"""
    publicaciones: List[Publication] = Field(default_factory=list)
    total: int = 0
    pagina: int = 1
    paginas: int = 1

"""Declarative table of the read-only Cifra public API resources.

Every listing operation is one ResourceSpec row: the endpoint it calls, the
noun used in its summary message and the typed filters it accepts.
ResourceService.list_resource drives all of them.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import NoSuchResourceError
from .utils import suggest_similar_strings

# =============================================================================
# FILTER MODELS
# =============================================================================
# Field names are the Python-side argument names; aliases are the query
# parameter names the server expects.


class ResourceFilters(BaseModel):
    """Filters accepted by a resource. The base class accepts none."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def to_params(self) -> dict[str, Any]:
        """Query parameters for the set filters only."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class PaymentFilters(ResourceFilters):
    status: str | None = Field(
        None, alias="estado", description="'cobrado' (collected) or 'pendiente' (pending)"
    )
    payment_method_id: int | None = Field(
        None,
        alias="forma_pago_id",
        description="Payment method id (see list_payment_methods)",
    )
    date_from: date | None = Field(
        None, alias="fecha_recibo_from", description="Receipt date from (YYYY-MM-DD)"
    )
    date_to: date | None = Field(
        None, alias="fecha_recibo_to", description="Receipt date to (YYYY-MM-DD)"
    )


class UserFilters(ResourceFilters):
    query: str | None = Field(
        None, alias="q", description="Free-text search over name and other fields"
    )


class SchoolStructureFilters(ResourceFilters):
    academic_year_id: int | None = Field(
        None,
        alias="anno_lectivo_id",
        description="Restrict to one academic year (see list_academic_years)",
    )


class TransportStopFilters(ResourceFilters):
    shift_id: int | None = Field(
        None, alias="turno_id", description="Only stops of this shift"
    )


# =============================================================================
# RESOURCE TABLE
# =============================================================================


@dataclass(frozen=True)
class ResourceSpec:
    """One listing operation against the public API."""

    name: str
    path: str
    noun: str
    description: str
    filters: type[ResourceFilters] = ResourceFilters
    coerce_single: bool = False  # server may answer with one object instead of a list

    def build_filters(
        self, filters: ResourceFilters | dict[str, Any] | None
    ) -> ResourceFilters:
        """Validate caller filters against this resource's filter model.

        Raises:
            pydantic.ValidationError: For unknown filter names or bad values.
            TypeError: For a filter model belonging to another resource.
        """
        if filters is None:
            return self.filters()
        if isinstance(filters, ResourceFilters):
            if type(filters) is not self.filters:
                raise TypeError(
                    f"{self.name} expects {self.filters.__name__}, "
                    f"got {type(filters).__name__}"
                )
            return filters
        return self.filters.model_validate(filters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "path": self.path,
            "noun": self.noun,
            "description": self.description,
            "filters": {
                name: field.description
                for name, field in self.filters.model_fields.items()
            },
        }


RESOURCES: tuple[ResourceSpec, ...] = (
    ResourceSpec(
        name="companies",
        path="/api_publica/v1/gestion_economica/empresas",
        noun="companies",
        description="Companies of the school used in economic management.",
    ),
    ResourceSpec(
        name="payments",
        path="/api_publica/v1/gestion_economica/cobros",
        noun="payments",
        description="Payments/receipts of the school's economic management.",
        filters=PaymentFilters,
    ),
    ResourceSpec(
        name="payment_methods",
        path="/api_publica/v1/gestion_economica/formas_pago",
        noun="payment methods",
        description=(
            "Payment methods available (card, transfer, direct debit, cash...). "
            "Use their ids to filter payments."
        ),
    ),
    ResourceSpec(
        name="plans",
        path="/api_publica/v1/gestion_economica/modalidades",
        noun="plans",
        description=(
            "Billing plans/concepts with amount, VAT, periodicity and linked service."
        ),
    ),
    ResourceSpec(
        name="users",
        path="/api_publica/v1/usuarios",
        noun="users",
        description="Users of the school.",
        filters=UserFilters,
    ),
    ResourceSpec(
        name="roles",
        path="/api_publica/v1/roles",
        noun="roles",
        description="Roles/profiles available in the school (student, teacher, tutor...).",
    ),
    ResourceSpec(
        name="academic_years",
        path="/api_publica/v1/annos_lectivos",
        noun="academic years",
        description="Academic years of the school.",
    ),
    ResourceSpec(
        name="school_structures",
        path="/api_publica/v1/estructuras",
        noun="school structures",
        description="School structure: levels, courses and groups.",
        filters=SchoolStructureFilters,
        coerce_single=True,
    ),
    ResourceSpec(
        name="incident_reports",
        path="/api_publica/v1/incidencias",
        noun="incident reports",
        description="Behaviour incident reports of the school.",
    ),
    ResourceSpec(
        name="transport_routes",
        path="/api_publica/v1/transporte/rutas",
        noun="transport routes",
        description="Active school transport routes.",
    ),
    ResourceSpec(
        name="transport_stops",
        path="/api_publica/v1/transporte/paradas",
        noun="transport stops",
        description="School transport stops.",
        filters=TransportStopFilters,
    ),
    ResourceSpec(
        name="services",
        path="/api_publica/v1/servicios/servicios",
        noun="services",
        description="Active services of the school (canteen, extracurricular activities...).",
    ),
)

RESOURCES_BY_NAME: dict[str, ResourceSpec] = {r.name: r for r in RESOURCES}


def get_resource(name: str) -> ResourceSpec:
    """Look up a resource by name.

    Raises:
        NoSuchResourceError: If no resource has that name.
    """
    try:
        return RESOURCES_BY_NAME[name]
    except KeyError:
        similar = suggest_similar_strings(name, list(RESOURCES_BY_NAME))
        raise NoSuchResourceError(
            f"Unknown resource: {name}",
            suggestions=[f"Did you mean '{s}'?" for s in similar]
            or [f"Available resources: {', '.join(RESOURCES_BY_NAME)}"],
            context={"resource": name},
        ) from None

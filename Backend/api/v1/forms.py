from uuid import UUID
from fastapi import APIRouter, Depends, status

from core.di_container import DependencyContainer
from dependency_injector.wiring import Provide, inject

from model.dto.base import BaseResponseDTO
from model.dto.forms import (
    ChangeTableDTO,
    FormDetailsDTO,
    FormFieldUpdateDTO,
    PreviewRequestDTO,
    ReorderFieldsDTO,
    StartFormSessionDTO,
)
from service.forms import FormService


forms_router = APIRouter(prefix="/forms", tags=["Forms"])

FormServiceDependency = Depends(Provide[DependencyContainer.form_service_factory])


@forms_router.post("/sessions", status_code=status.HTTP_201_CREATED)
@inject
async def start_session(
    dto: StartFormSessionDTO, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    session = await service.start_session(dto.table_name)

    return BaseResponseDTO(data=session, message="Form session started.")


@forms_router.get("/sessions/{session_id}", status_code=status.HTTP_200_OK)
@inject
async def get_session(
    session_id: UUID, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    session = await service.get_session(session_id)

    return BaseResponseDTO(data=session, message="Form session retrieved.")


@forms_router.delete("/sessions/{session_id}", status_code=status.HTTP_200_OK)
@inject
async def close_session(
    session_id: UUID, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    await service.close_session(session_id)

    return BaseResponseDTO(message="Form session closed.")


@forms_router.patch("/sessions/{session_id}", status_code=status.HTTP_200_OK)
@inject
async def update_details(
    session_id: UUID,
    dto: FormDetailsDTO,
    service: FormService = FormServiceDependency,
) -> BaseResponseDTO:
    session = await service.update_details(session_id, dto)

    return BaseResponseDTO(data=session, message="Form details updated.")


@forms_router.put("/sessions/{session_id}/table", status_code=status.HTTP_200_OK)
@inject
async def change_table(
    session_id: UUID,
    dto: ChangeTableDTO,
    service: FormService = FormServiceDependency,
) -> BaseResponseDTO:
    session = await service.change_table(session_id, dto.table_name)

    return BaseResponseDTO(data=session, message="Fields derived from the new table.")


@forms_router.post(
    "/sessions/{session_id}/fields/{field_id}/select", status_code=status.HTTP_200_OK
)
@inject
async def select_field(
    session_id: UUID, field_id: str, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    session = await service.select_field(session_id, field_id)

    return BaseResponseDTO(data=session, message="Field selected.")


# Declared before the `{field_id}` route so `selected` is not taken as an id
@forms_router.patch(
    "/sessions/{session_id}/fields/selected", status_code=status.HTTP_200_OK
)
@inject
async def update_selected_field(
    session_id: UUID,
    dto: FormFieldUpdateDTO,
    service: FormService = FormServiceDependency,
) -> BaseResponseDTO:
    field = await service.update_selected_field(session_id, dto)

    return BaseResponseDTO(data=field, message="Field updated.")


@forms_router.patch(
    "/sessions/{session_id}/fields/{field_id}", status_code=status.HTTP_200_OK
)
@inject
async def update_field(
    session_id: UUID,
    field_id: str,
    dto: FormFieldUpdateDTO,
    service: FormService = FormServiceDependency,
) -> BaseResponseDTO:
    field = await service.update_field(session_id, field_id, dto)

    return BaseResponseDTO(data=field, message="Field updated.")


@forms_router.post(
    "/sessions/{session_id}/fields/{field_id}/options", status_code=status.HTTP_200_OK
)
@inject
async def load_field_options(
    session_id: UUID, field_id: str, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    field = await service.load_field_options(session_id, field_id)

    return BaseResponseDTO(data=field, message="Field options loaded.")


@forms_router.post("/sessions/{session_id}/reorder", status_code=status.HTTP_200_OK)
@inject
async def reorder_fields(
    session_id: UUID,
    dto: ReorderFieldsDTO,
    service: FormService = FormServiceDependency,
) -> BaseResponseDTO:
    session = await service.reorder_fields(session_id, dto)

    return BaseResponseDTO(data=session, message="Fields reordered.")


@forms_router.post("/sessions/{session_id}/preview", status_code=status.HTTP_200_OK)
@inject
async def preview_form(
    session_id: UUID,
    dto: PreviewRequestDTO,
    service: FormService = FormServiceDependency,
) -> BaseResponseDTO:
    preview = await service.preview(session_id, dto.values)

    return BaseResponseDTO(data=preview, message="Form preview rendered.")


@forms_router.post("/sessions/{session_id}/save", status_code=status.HTTP_201_CREATED)
@inject
async def save_form(
    session_id: UUID, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    config = await service.save_form(session_id)

    return BaseResponseDTO(data=config, message="Form saved successfully.")


@forms_router.get("", status_code=status.HTTP_200_OK)
@inject
async def list_forms(
    table_name: str | None = None, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    forms = await service.list_forms(table_name)

    return BaseResponseDTO(data=forms, message="Forms retrieved successfully.")


@forms_router.get("/{form_id}", status_code=status.HTTP_200_OK)
@inject
async def get_form(
    form_id: UUID, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    config = await service.get_form(form_id)

    return BaseResponseDTO(data=config, message="Form retrieved successfully.")


@forms_router.get("/{form_id}/source", status_code=status.HTTP_200_OK)
@inject
async def get_form_source(
    form_id: UUID, service: FormService = FormServiceDependency
) -> BaseResponseDTO:
    source = await service.generate_form_source(form_id)

    return BaseResponseDTO(data=source, message="Form source generated.")

"""
PTO Routes - administration for the caller's tenant

GET /pto/dashboard - Tenant totals and per-department counts
GET /pto/departments - List departments
GET /pto/departments/catalog - Department code/name pairs
POST /pto/departments - Create department
PUT /pto/departments/{code} - Rename department
DELETE /pto/departments/{code} - Delete department
POST /pto/departments/{code}/assign-staff - Add staff member to department
POST /pto/departments/{code}/unassign-staff - Remove staff member from department
GET /pto/staff - List staff
POST /pto/staff - Create staff member
PUT /pto/staff/{staff_id} - Update staff member
DELETE /pto/staff/{staff_id} - Delete staff member
GET /pto/students - List students
GET /pto/assessments - List the tenant's assessments
POST /pto/assessments - Create assessment in the tenant
PUT /pto/assessments/{assessment_id} - Update one of the tenant's assessments
DELETE /pto/assessments/{assessment_id} - Delete one of the tenant's assessments
"""

from fastapi import APIRouter, Depends

from placipy.api.dependencies import get_assessment_service, get_pto_service, get_tenant_domain
from placipy.core.auth import get_current_user, caller_email, caller_id
from placipy.services.assessment_service import AssessmentService
from placipy.services.pto_service import PTOService
from placipy.schemas.schemas import (
    DataResponse, MessageResponse, DepartmentCreate, DepartmentUpdate,
    StaffAssignment, StaffCreate, StaffUpdate, AssessmentCreate, AssessmentUpdate
)

router = APIRouter(prefix="/pto", tags=["PTO"])


@router.get("/dashboard", response_model=DataResponse)
async def get_dashboard(domain: str = Depends(get_tenant_domain), service: PTOService = Depends(get_pto_service)):
    return DataResponse(data=service.get_dashboard(domain))


# ============================================================
# DEPARTMENTS
# ============================================================

@router.get("/departments", response_model=DataResponse)
async def get_departments(domain: str = Depends(get_tenant_domain), service: PTOService = Depends(get_pto_service)):
    return DataResponse(data=service.get_departments(domain))


@router.get("/departments/catalog", response_model=DataResponse)
async def get_department_catalog(domain: str = Depends(get_tenant_domain), service: PTOService = Depends(get_pto_service)):
    return DataResponse(data=service.get_department_catalog(domain))


@router.post("/departments", response_model=DataResponse, status_code=201)
async def create_department(
    data: DepartmentCreate,
    domain: str = Depends(get_tenant_domain),
    service: PTOService = Depends(get_pto_service)
):
    return DataResponse(data=service.create_department(domain, data.model_dump(exclude_none=True)))


@router.put("/departments/{code}", response_model=DataResponse)
async def update_department(
    code: str,
    data: DepartmentUpdate,
    domain: str = Depends(get_tenant_domain),
    service: PTOService = Depends(get_pto_service)
):
    return DataResponse(data=service.update_department(domain, code, data.model_dump()))


@router.delete("/departments/{code}", response_model=MessageResponse)
async def delete_department(code: str, domain: str = Depends(get_tenant_domain), service: PTOService = Depends(get_pto_service)):
    service.delete_department(domain, code)
    return MessageResponse(message="Department deleted")


@router.post("/departments/{code}/assign-staff", response_model=DataResponse)
async def assign_staff(
    code: str,
    data: StaffAssignment,
    domain: str = Depends(get_tenant_domain),
    service: PTOService = Depends(get_pto_service)
):
    return DataResponse(data=service.assign_staff_to_department(domain, code, data.staff_id))


@router.post("/departments/{code}/unassign-staff", response_model=DataResponse)
async def unassign_staff(
    code: str,
    data: StaffAssignment,
    domain: str = Depends(get_tenant_domain),
    service: PTOService = Depends(get_pto_service)
):
    return DataResponse(data=service.unassign_staff_from_department(domain, code, data.staff_id))


# ============================================================
# STAFF
# ============================================================

@router.get("/staff", response_model=DataResponse)
async def get_staff(domain: str = Depends(get_tenant_domain), service: PTOService = Depends(get_pto_service)):
    return DataResponse(data=service.get_staff(domain))


@router.post("/staff", response_model=DataResponse, status_code=201)
async def create_staff(
    data: StaffCreate,
    domain: str = Depends(get_tenant_domain),
    service: PTOService = Depends(get_pto_service)
):
    return DataResponse(data=service.create_staff(domain, data.model_dump()))


@router.put("/staff/{staff_id}", response_model=DataResponse)
async def update_staff(
    staff_id: str,
    data: StaffUpdate,
    domain: str = Depends(get_tenant_domain),
    service: PTOService = Depends(get_pto_service)
):
    return DataResponse(data=service.update_staff(domain, staff_id, data.model_dump(exclude_unset=True)))


@router.delete("/staff/{staff_id}", response_model=MessageResponse)
async def delete_staff(staff_id: str, domain: str = Depends(get_tenant_domain), service: PTOService = Depends(get_pto_service)):
    service.delete_staff(domain, staff_id)
    return MessageResponse(message="Staff deleted")


# ============================================================
# STUDENTS
# ============================================================

@router.get("/students", response_model=DataResponse)
async def get_students(domain: str = Depends(get_tenant_domain), service: PTOService = Depends(get_pto_service)):
    return DataResponse(data=service.get_students(domain))


# ============================================================
# ASSESSMENTS (caller's tenant only)
# ============================================================

@router.get("/assessments", response_model=DataResponse)
async def get_assessments(domain: str = Depends(get_tenant_domain), service: PTOService = Depends(get_pto_service)):
    return DataResponse(data=service.get_assessments(domain))


@router.post("/assessments", response_model=DataResponse, status_code=201)
async def create_assessment(
    assessment: AssessmentCreate,
    user: dict = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service)
):
    """The record is stored under the creator's tenant."""
    data = assessment.model_dump(by_alias=True, exclude_none=True, mode="json")
    return DataResponse(data=service.create_assessment(data, caller_email(user) or caller_id(user)))


@router.put("/assessments/{assessment_id}", response_model=DataResponse)
async def update_assessment(
    assessment_id: str,
    update: AssessmentUpdate,
    user: dict = Depends(get_current_user),
    domain: str = Depends(get_tenant_domain),
    service: AssessmentService = Depends(get_assessment_service)
):
    updates = update.model_dump(by_alias=True, mode="json", include=update.model_fields_set)
    updated_by_name = updates.pop("updatedByName", None)
    record = service.update_assessment(
        assessment_id,
        updates,
        updated_by=caller_email(user) or caller_id(user),
        updated_by_name=updated_by_name,
        domain=domain
    )
    return DataResponse(data=record)


@router.delete("/assessments/{assessment_id}", response_model=MessageResponse)
async def delete_assessment(
    assessment_id: str,
    domain: str = Depends(get_tenant_domain),
    service: AssessmentService = Depends(get_assessment_service)
):
    service.delete_assessment(assessment_id, domain=domain)
    return MessageResponse(message="Assessment deleted successfully")

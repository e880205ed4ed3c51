"""Employee records router (read-only)."""
from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse

from dirlib.errors import FetchError
from ..dependencies import get_source, _logger
from ..types import EmployeeList

router = APIRouter()

_NOT_IMPLEMENTED = "Employee records are read-only in this demo"


@router.get("/api/employees", tags=["Employees"], summary="List employees", description="Return every employee record from the demo data file.")
def get_employees():
    try:
        employees: EmployeeList = get_source().load()
    except FetchError as e:
        _logger.error("GET /api/employees failed: %s", e)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch employees"})
    return {"employees": employees}


@router.get("/api/employees/{emp_id}", tags=["Employees"], summary="Get employee by ID")
def get_employee(emp_id: str):
    try:
        e = get_source().get(emp_id)
    except FetchError as exc:
        _logger.error("GET /api/employees/%s failed: %s", emp_id, exc)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch employees"})
    if e is None:
        raise HTTPException(status_code=404, detail=f"Employee ID {emp_id} not found")
    return e


# ── Write stubs ───────────────────────────────────────────────

@router.post("/api/employees", tags=["Employees"], summary="Create employee (not implemented)")
def create_employee():
    raise HTTPException(status_code=501, detail=_NOT_IMPLEMENTED)


@router.put("/api/employees/{emp_id}", tags=["Employees"], summary="Update employee (not implemented)")
def update_employee(emp_id: str):
    raise HTTPException(status_code=501, detail=_NOT_IMPLEMENTED)


@router.delete("/api/employees/{emp_id}", tags=["Employees"], summary="Delete employee (not implemented)")
def delete_employee(emp_id: str):
    raise HTTPException(status_code=501, detail=_NOT_IMPLEMENTED)

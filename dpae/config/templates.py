"""
config/templates.py
──────────────────────────────────────────────────────────────────────────────
XML document templates sent to URSSAF, in one place.

Templates use str.format syntax rendered by services/renderer.py:
  {field:xml}      free text → sanitised (32 chars, whitelist, XML-escaped)
  {field}          code or identifier → XML-escaped only
  {date:%d%m%Y}    calendar date
  {time:%H%M}      clock time
  {block:raw}      pre-rendered sub-template, inserted as is

A field missing from the render context is an error, never a blank.
"""
from __future__ import annotations

# ── Authentication request ─────────────────────────────────────────────────────
AUTH_TEMPLATE = """\
<identifiants>
  <siret>{siret}</siret>
  <nom>{surname}</nom>
  <prenom>{first_name}</prenom>
  <motdepasse>{password}</motdepasse>
  <service>{service}</service>
</identifiants>
"""

# ── Declaration document (DPAE, FR_DUE format) ─────────────────────────────────
DECLARATION_TEMPLATE = """\
<?xml version="1.0" encoding="ISO-8859-1"?>
<FR_DUE_Upload>
  <FR_DUE_Header>
    <FR_DUE_Header.TestIndicator>{test_indicator}</FR_DUE_Header.TestIndicator>
  </FR_DUE_Header>
  <FR_DUE_Group>
    <FR_DUE_Employer>
      <FR_DUE_Employer.Designation>{employer_designation:xml}</FR_DUE_Employer.Designation>
      <FR_DUE_Employer.SIRET>{employer_siret}</FR_DUE_Employer.SIRET>
      <FR_DUE_Employer.APE>{employer_ape}</FR_DUE_Employer.APE>
      <FR_DUE_Employer.URSSAFCode>{employer_urssaf_code}</FR_DUE_Employer.URSSAFCode>
      <FR_DUE_Employer.Adress>{employer_address:xml}</FR_DUE_Employer.Adress>
      <FR_DUE_Employer.Town>{employer_town:xml}</FR_DUE_Employer.Town>
      <FR_DUE_Employer.Postal>{employer_postal_code}</FR_DUE_Employer.Postal>
      <FR_DUE_Employer.Phone>{employer_phone}</FR_DUE_Employer.Phone>
      <FR_DUE_Employer.HealthService>{employer_health_service}</FR_DUE_Employer.HealthService>
    </FR_DUE_Employer>
    <FR_DUE_Employee>
      <FR_DUE_Employee.Surname>{employee_surname:xml}</FR_DUE_Employee.Surname>
      <FR_DUE_Employee.ChristianName>{employee_first_name:xml}</FR_DUE_Employee.ChristianName>
      <FR_DUE_Employee.Sex>{employee_sex}</FR_DUE_Employee.Sex>
      <FR_DUE_Employee.NIR>{employee_nir}</FR_DUE_Employee.NIR>
      <FR_DUE_Employee.NIRKey>{employee_nir_key}</FR_DUE_Employee.NIRKey>
      <FR_DUE_Employee.BirthDate>{employee_birth_date:%d%m%Y}</FR_DUE_Employee.BirthDate>
      <FR_DUE_Employee.BirthTown>{employee_birth_town:xml}</FR_DUE_Employee.BirthTown>
      <FR_DUE_Employee.BirthDepartment>{employee_birth_department}</FR_DUE_Employee.BirthDepartment>
    </FR_DUE_Employee>
    <FR_DUE_Contract>
      <FR_DUE_Contract.StartContractDate>{contract_start_date:%d%m%Y}</FR_DUE_Contract.StartContractDate>
      <FR_DUE_Contract.StartContractTime>{contract_start_time:%H%M}</FR_DUE_Contract.StartContractTime>
{end_date_block:raw}      <FR_DUE_Contract.NatureCode>{contract_nature_code}</FR_DUE_Contract.NatureCode>
    </FR_DUE_Contract>
  </FR_DUE_Group>
</FR_DUE_Upload>
"""

# ── Optional end date (fixed-term contracts only) ──────────────────────────────
END_DATE_TEMPLATE = """\
      <FR_DUE_Contract.EndContractDate>{contract_end_date:%d%m%Y}</FR_DUE_Contract.EndContractDate>
"""

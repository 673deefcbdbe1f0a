"""Spreadsheet header names, matched literally.

Two headers carry quirks of the real export and must not be "fixed":
'Télefono' has a misplaced accent and 'ID  Moodle' has two spaces.
"""

FICHA = "Ficha"
RUT = "RUT"
NOMBRES = "Nombres"
APELLIDOS = "Apellidos"
CORREO = "Correo electrónico"
TELEFONO = "Télefono"
VALOR_COBRADO = "Valor Cobrado"
FRANQUICIA = "%Franquicia"
OBSERVACIONES = "Observaciones"
EMPRESA = "Empresa"
CURSO = "Curso"
ID_MOODLE = "ID  Moodle"
CORRELATIVO = "Correlativo"
ORDEN_COMPRA = "Orden de Compra"
CODIGO_SENCE = "Código Sence"
ID_SENCE = "ID Sence"
MODALIDAD = "Modalidad"
FECHA_INICIO = "F. Inicio"
FECHA_TERMINO = "F. Termino"
EJECUTIVO = "Ejecutivo"

DATE_COLUMNS = frozenset({FECHA_INICIO, FECHA_TERMINO})

ALL_COLUMNS = (
    FICHA, RUT, NOMBRES, APELLIDOS, CORREO, TELEFONO, VALOR_COBRADO, FRANQUICIA,
    OBSERVACIONES, EMPRESA, CURSO, ID_MOODLE, CORRELATIVO, ORDEN_COMPRA,
    CODIGO_SENCE, ID_SENCE, MODALIDAD, FECHA_INICIO, FECHA_TERMINO, EJECUTIVO,
)

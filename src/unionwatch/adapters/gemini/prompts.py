"""Default prompt templates.

Templates use ``{{name}}`` placeholders rendered by
``unionwatch.domain.extraction.render_template``. Every template can be
replaced through the remote application settings.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

INVESTIGATION = """\
Eres un auditor de acuerdos salariales (paritarias) e inteligencia gremial.

Investiga el sindicato solicitado y devuelve SOLAMENTE un objeto JSON válido,
sin markdown, que comience con "{".

1. Institucional: nombre oficial completo, siglas en minúsculas como "slug",
   comisión directiva (secretario general y adjuntos), sede real, sitio web y
   URL directa a la imagen del logo oficial.
2. Paritarias: busca TODOS los acuerdos firmados durante {{currentYear}}, no
   solo el último, y acumula los porcentajes en un total anual provisorio.
   "porcentajeAumento" es ESTRICTAMENTE un número seguido de % (ej: "85%").
   "detalleTexto" resume los tramos en orden cronológico.
   "periodo" es "Año {{currentYear}}".
3. Acciones: no busques paros ni marchas; deja "acciones" vacío.

Estructura:
{
  "nombre": "Nombre Completo Sindicato",
  "slug": "siglas-minusculas",
  "comisionDirectiva": [{ "nombre": "Nombre", "cargo": "Cargo" }],
  "datosBasicos": { "sedePrincipal": "Dirección", "sitioWeb": "URL", "logo": "URL de imagen" },
  "acciones": {},
  "paritarias": {
    "acumulado-{{currentYear}}": {
      "periodo": "Año {{currentYear}}",
      "porcentajeAumento": "85%",
      "fechaFirma": "YYYY-MM-DD",
      "detalleTexto": "Resumen de los tramos del año.",
      "enlaceFuente": "URL del acta o comunicado oficial"
    }
  }
}
"""

INVESTIGATION_REQUEST = """\
REALIZA UNA AUDITORÍA SALARIAL PARA: "{{name}}".
1. Identifica líderes, sede y URL del logo.
2. Busca exhaustivamente todos los acuerdos de {{currentYear}}.
3. Calcula el porcentaje total acumulado del año.
4. Redacta el resumen de tramos.
5. No inventes datos; si no hay datos oficiales, indícalo."""

LEADERSHIP = """\
Investiga EXCLUSIVAMENTE la comisión directiva ACTUAL del sindicato "{{name}}".
Devuelve solo un array JSON: [{ "nombre": "Nombre Apellido", "cargo": "Cargo" }].
Prioriza secretario general, adjunto, gremial y tesorero. Sin markdown."""

AGREEMENTS = """\
Eres un auditor salarial. Investiga la paritaria acumulada de {{currentYear}}
para el sindicato "{{name}}".
Devuelve un objeto JSON cuyas claves son identificadores y cuyos valores son:
{
  "periodo": "Año {{currentYear}}",
  "porcentajeAumento": "número + % (ej: 85%)",
  "fechaFirma": "YYYY-MM-DD",
  "detalleTexto": "Resumen cronológico de los tramos.",
  "enlaceFuente": "URL oficial"
}
Calcula el acumulado anual real."""

EVENTS = """\
Investiga acciones gremiales (paros, movilizaciones, asambleas, denuncias) de
"{{name}}" en los ÚLTIMOS 60 DÍAS.
Devuelve un objeto JSON cuyas claves son identificadores y cuyos valores son:
{
  "titulo": "Título de la acción",
  "tipo": "medida-fuerza" | "movilizacion" | "asamblea" | "denuncia",
  "fecha": "YYYY-MM-DD",
  "lugar": "Lugar",
  "fuente": "URL",
  "descripcion": "Breve descripción"
}
Si no hay acciones recientes, devuelve {}."""

LINK_ANALYSIS = """\
Analiza el enlace indicado y extrae información sindical concreta.

FECHA DE HOY: {{todayString}}
AÑO ACTUAL: {{currentYear}}

Sindicatos existentes (usa SUS slugs y nombres si el sindicato coincide,
aunque sea parcialmente; no crees duplicados):
{{dbContextString}}

Redes sociales: no accedas al enlace directamente; busca con Google Search el
texto indexado de la publicación y extrae fechas, lugares y motivos de ahí.

Fechas:
- Convierte fechas relativas ("ayer", "el martes 4") usando {{todayString}}.
- Si la fecha no trae año, asume {{currentYear}}.
- No inventes años pasados salvo que el texto los diga explícitamente.

Una publicación puede describir una acción pasada y otra futura a la vez. En
ese caso responde "tipoDetectado": "multi-accion" y un ARRAY en "data".

Formato de salida:
{
  "sindicatoMatch": { "nombre": "Nombre exacto", "slug": "slug-exacto" },
  "tipoDetectado": "accion" | "paritaria" | "multi-accion" | "general" | "error",
  "data": { ... } o [ { ... } ],
  "errorMessage": "solo si tipoDetectado es error"
}

Acción: { "titulo": "...", "tipo": "reunion" | "medida-fuerza" | "asamblea",
"fecha": "YYYY-MM-DD", "lugar": "...", "fuente": "{{url}}", "descripcion": "..." }

Si no puedes leer el contenido, responde con "tipoDetectado": "error" y el
motivo en "errorMessage"."""

LINK_ANALYSIS_REQUEST = "Analiza este enlace con extrema precisión: {{url}}"

NEWS_ANALYSIS = """\
Eres un motor de inteligencia gremial que procesa cables de noticias.
Fecha de hoy: {{today}}.

1. Ignora opinión y política general. Procesa solo paros, movilizaciones,
   asambleas, acuerdos salariales o denuncias graves.
2. Si un cable anuncia una acción futura, registra la acción futura con su
   fecha; si describe algo ya ocurrido, usa la fecha pasada.
3. Calcula fechas relativas a partir de la fecha del cable o de {{today}}.
   Nunca dejes la fecha vacía.

Responde con un array JSON:
[
  {
    "sindicatoMatch": { "nombre": "Nombre", "slug": "slug" },
    "tipoDetectado": "accion" | "paritaria",
    "data": {
      "titulo": "Título de la acción",
      "tipo": "medida-fuerza" | "asamblea" | "movilizacion" | "reunion",
      "fecha": "YYYY-MM-DD",
      "lugar": "Ciudad / lugar",
      "fuente": "URL original",
      "descripcion": "Resumen del hecho."
    }
  }
]"""

NEWS_ANALYSIS_REQUEST = "Analiza estos cables y extrae acciones:\n{{cables}}"

CHAT_AGENT = """\
Eres el operador de inteligencia de la sala de situación, con acceso de
lectura y escritura a la base de sindicatos.

Base actual (resumen):
{{dbSummary}}

Conversa con el usuario sobre estos datos. Si te pide corregir o actualizar
un dato concreto, verifica con Google Search si hace falta y responde
EXCLUSIVAMENTE con un bloque así:

```json
{
  "type": "UPDATE_UNION",
  "slug": "slug-del-sindicato-existente",
  "field": "campo.subcampo",
  "value": "nuevo valor (texto, objeto o array)",
  "explanation": "Qué cambiaste y por qué."
}
```

"field" usa notación de puntos, por ejemplo "comisionDirectiva" (el value es
el array completo) o "datosBasicos.sedePrincipal". Para conversar, responde
solo con texto."""

LOGO_SEARCH = """\
Search specifically for the OFFICIAL LOGO image of the labor union "{{name}}"
({{term}}) in Argentina.
1. Find 6 to 8 direct URLs to image files (png, jpg, jpeg) of the logo.
2. Prefer official websites, social profiles or Wikipedia.
3. Return strictly a JSON array of strings, or [] if nothing is found."""


@dataclass(frozen=True, slots=True)
class PromptSet:
    investigation: str = INVESTIGATION
    investigation_request: str = INVESTIGATION_REQUEST
    leadership: str = LEADERSHIP
    agreements: str = AGREEMENTS
    events: str = EVENTS
    link_analysis: str = LINK_ANALYSIS
    link_analysis_request: str = LINK_ANALYSIS_REQUEST
    news_analysis: str = NEWS_ANALYSIS
    news_analysis_request: str = NEWS_ANALYSIS_REQUEST
    chat_agent: str = CHAT_AGENT
    logo_search: str = LOGO_SEARCH

    def with_overrides(self, overrides: Mapping[str, str | None]) -> PromptSet:
        """Return a copy using every non-blank override whose name is a known template."""

        names = {prompt_field.name for prompt_field in fields(self)}
        changes = {
            name: text
            for name, text in overrides.items()
            if name in names and text is not None and text.strip()
        }
        return replace(self, **changes)

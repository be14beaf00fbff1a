from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.table import Table, TableStyleInfo

from postes.domain.formatters import format_date, metodo_pagamento_label, tipo_venda_label
from postes.domain.models import Venda

log = logging.getLogger(__name__)

RELATORIO_COLUNAS = ["Data", "Tipo", "Poste", "Qtd", "Valor Venda", "Valor Extra", "Frete", "Pagamento", "Obs"]


def linhas_relatorio(vendas: Iterable[Venda]) -> list[dict[str, Any]]:
    return [
        {
            "Data": format_date(v.data_venda, include_time=True),
            "Tipo": tipo_venda_label(v.tipo_venda),
            "Poste": v.codigo_poste or "-",
            "Qtd": v.quantidade or "-",
            "Valor Venda": v.valor_venda,
            "Valor Extra": v.valor_extra,
            "Frete": v.frete_eletrons,
            "Pagamento": metodo_pagamento_label(v.metodo_pagamento),
            "Obs": v.observacoes or "",
        }
        for v in vendas
    ]


def to_csv(rows: Iterable[Mapping[str, Any]]) -> str:
    """
    Header = keys of the first record. Values with commas, quotes or line
    breaks are quoted, inner quotes doubled.
    """
    rows = list(rows)
    if not rows:
        return ""
    header = list(rows[0].keys())
    buf = io.StringIO()
    writer = csv.writer(buf, delimiter=",", quotechar='"', quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(header)
    for row in rows:
        writer.writerow(["" if row.get(col) is None else row.get(col) for col in header])
    return buf.getvalue()


class ExportService:
    def exportar_csv(self, rows: Iterable[Mapping[str, Any]], path: str | Path) -> Path:
        path = Path(path)
        rows = list(rows)
        # utf-8-sig writes the BOM spreadsheet apps need to detect UTF-8
        with path.open("w", encoding="utf-8-sig", newline="") as fh:
            fh.write(to_csv(rows))
        log.info("csv_exported path=%s rows=%s", path, len(rows))
        return path

    def exportar_excel(self, path: str | Path, resumo, linhas: list[dict[str, Any]], periodo: str = "") -> Path:
        wb = Workbook()

        def money(cell):
            cell.number_format = "#,##0.00"

        def bold_row(ws, r):
            for c in ws[r]:
                c.font = Font(bold=True)

        def set_widths(ws, widths: dict[str, int]):
            for col, w in widths.items():
                ws.column_dimensions[col].width = w

        # -------- 1) Resumo --------
        ws = wb.active
        ws.title = "Resumo"
        ws["A1"] = "Resumo"
        ws["A1"].font = Font(bold=True, size=14)
        ws["A3"] = "Período"
        ws["B3"] = periodo

        rows = [
            ("Vendas normais (V)", float(resumo.total_v)),
            ("Extras (E)", float(resumo.total_e)),
            ("Frete Eletrons (L)", float(resumo.total_l)),
            ("Receita total", float(resumo.total_receita)),
            ("Despesas", float(resumo.total_despesas)),
            ("Lucro líquido", float(resumo.lucro_liquido)),
        ]
        start_row = 5
        for i, (label, val) in enumerate(rows):
            r = start_row + i
            ws[f"A{r}"] = label
            ws[f"B{r}"] = val
            money(ws[f"B{r}"])

        r = start_row + len(rows) + 1
        ws[f"A{r}"] = "Por método de pagamento"
        ws[f"A{r}"].font = Font(bold=True)
        for label, val in resumo.por_metodo:
            r += 1
            ws[f"A{r}"] = label
            ws[f"B{r}"] = float(val)
            money(ws[f"B{r}"])
        set_widths(ws, {"A": 28, "B": 20})

        # -------- 2) Vendas --------
        ws2 = wb.create_sheet("Vendas")
        ws2.append(RELATORIO_COLUNAS)
        bold_row(ws2, 1)
        for out_row, linha in enumerate(linhas, start=2):
            ws2.append([linha.get(c) for c in RELATORIO_COLUNAS])
            for col in ("E", "F", "G"):
                money(ws2[f"{col}{out_row}"])

        ws2.freeze_panes = "A2"
        set_widths(ws2, {"A": 18, "B": 14, "C": 14, "D": 6, "E": 14, "F": 14, "G": 14, "H": 16, "I": 36})
        if ws2.max_row >= 2:
            ref = f"A1:{get_column_letter(len(RELATORIO_COLUNAS))}{ws2.max_row}"
            tab = Table(displayName="Vendas", ref=ref)
            tab.tableStyleInfo = TableStyleInfo(name="TableStyleMedium9", showRowStripes=True, showColumnStripes=False)
            ws2.add_table(tab)

        path = Path(path)
        wb.save(path)
        log.info("excel_exported path=%s rows=%s", path, len(linhas))
        return path

import csv
from pathlib import Path
from typing import List, Optional
from loguru import logger
from pydantic import BaseModel
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, TableStyle, LongTable
from reportlab.lib.enums import TA_CENTER
import openpyxl
from openpyxl.styles import PatternFill, Border, Side, Alignment, Font
from openpyxl.utils import get_column_letter

from ..models.config import ReportsConfig
from ..models.entities import ScheduleResult, Team

REPORT_NAME = "relatorio_agendamento"
ACCENT_COLOR = colors.HexColor('#FF6B00')


class GanttRow(BaseModel):
    """Linha do gráfico de Gantt: um ticket e as sprints que ele ocupa"""
    team_name: str
    ticket_id: str
    title: str
    cells: List[bool]


def build_gantt_rows(teams: List[Team]) -> List[GanttRow]:
    """
    Monta a matriz de ocupação das sprints

    Cada ticket aparece uma única vez, no primeiro time em que é encontrado.
    Todas as linhas têm o tamanho da maior linha do tempo entre os times.

    Args:
        teams: Times com a linha do tempo preenchida

    Returns:
        List[GanttRow]: Linhas por time, na ordem das sprints
    """
    sprint_count = max((len(team.sprints) for team in teams), default=0)
    rows = []
    seen = {}

    for team in teams:
        for index, ticket in enumerate(team.sprints):
            if ticket is None:
                continue
            row = seen.get(ticket.id)
            if row is None:
                row = GanttRow(
                    team_name=team.name,
                    ticket_id=ticket.id,
                    title=ticket.title,
                    cells=[False] * sprint_count,
                )
                seen[ticket.id] = row
                rows.append(row)
            row.cells[index] = True

    return rows


class ReportGenerator:
    """Serviço responsável pela geração de relatórios"""

    def __init__(
        self,
        result: ScheduleResult,
        output_dir: str,
        marker: str = "X",
        reports: Optional[ReportsConfig] = None,
    ):
        """
        Inicializa o gerador de relatórios

        Args:
            result: Resultado do agendamento
            output_dir: Diretório de saída dos relatórios
            marker: Texto usado nas células ocupadas do Gantt em CSV
            reports: Formatos adicionais habilitados
        """
        self.result = result
        self.output_dir = Path(output_dir)
        self.marker = marker
        self.reports = reports or ReportsConfig()
        self.rows = build_gantt_rows(result.teams)

        # Cria o diretório de saída se não existir
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.styles = getSampleStyleSheet()
        self._setup_styles()

        self.excel_colors = {
            'header': PatternFill(start_color='FF6B00', end_color='FF6B00', fill_type='solid'),   # Laranja
            'busy': PatternFill(start_color='B3FFB3', end_color='B3FFB3', fill_type='solid'),     # Verde claro
            'idle': PatternFill(start_color='FFFFB3', end_color='FFFFB3', fill_type='solid'),     # Amarelo claro
        }

    @property
    def sprint_count(self) -> int:
        return self.result.sprint_count

    def _setup_styles(self):
        """Registra os estilos de parágrafo usados no PDF"""
        self.styles.add(ParagraphStyle(
            'ReportTitle', parent=self.styles['Title'],
            fontSize=16, spaceAfter=24, textColor=ACCENT_COLOR, alignment=TA_CENTER
        ))
        self.styles.add(ParagraphStyle(
            'SectionHeading', parent=self.styles['Heading2'],
            spaceAfter=10, textColor=ACCENT_COLOR
        ))
        self.styles.add(ParagraphStyle('SummaryText', parent=self.styles['Normal'], spaceAfter=6))
        self.styles.add(ParagraphStyle('GridCell', parent=self.styles['Normal'], fontSize=8, leading=10))
        self.styles.add(ParagraphStyle(
            'GridHeader', parent=self.styles['GridCell'],
            fontName='Helvetica-Bold', textColor=colors.white
        ))

    def _create_table_style(self) -> TableStyle:
        """Estilo comum das tabelas do PDF: cabeçalho destacado e linhas alternadas"""
        return TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), ACCENT_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#FFF5EB')]),
        ])

    def sprint_headers(self) -> List[str]:
        return [f"Sprint {index + 1}" for index in range(self.sprint_count)]

    def sorted_ticket_lines(self) -> List[List[str]]:
        """Linhas do CSV de tickets ordenados, com cabeçalho"""
        lines = [["Ticket ID", "Ticket Title"]]
        lines.extend([ticket.id, ticket.title] for ticket in self.result.ordered_tickets)
        return lines

    def gantt_lines(self) -> List[List[str]]:
        """Linhas do CSV do Gantt, com cabeçalho"""
        lines = [["Team name", "Ticket ID", "Title", *self.sprint_headers()]]
        for row in self.rows:
            lines.append([
                row.team_name,
                row.ticket_id,
                row.title,
                *[self.marker if busy else "" for busy in row.cells],
            ])
        return lines

    def _write_csv(self, path: Path, lines: List[List[str]]) -> None:
        with path.open("w", newline="", encoding="utf-8") as f:
            csv.writer(f).writerows(lines)
        logger.info(f"Arquivo CSV gerado em {path}")

    def write_sorted_tickets(self) -> Path:
        """Grava a ordem de prioridade em sorted-tickets.csv"""
        path = self.output_dir / "sorted-tickets.csv"
        self._write_csv(path, self.sorted_ticket_lines())
        return path

    def write_gantt(self) -> Path:
        """Grava a matriz de ocupação em gantt.csv"""
        path = self.output_dir / "gantt.csv"
        self._write_csv(path, self.gantt_lines())
        return path

    def generate(self) -> List[Path]:
        """
        Gera os arquivos de saída do agendamento

        Returns:
            List[Path]: Arquivos gerados
        """
        generated = [self.write_sorted_tickets(), self.write_gantt()]

        if self.reports.markdown:
            markdown_path = self.output_dir / f"{REPORT_NAME}.md"
            markdown_path.write_text(self._generate_markdown(), encoding='utf-8')
            logger.info(f"Relatório Markdown gerado em {markdown_path}")
            generated.append(markdown_path)

        if self.reports.excel:
            generated.append(self._generate_excel())

        if self.reports.pdf:
            generated.append(self._generate_pdf())

        return generated

    def _team_summary(self) -> List[List[str]]:
        """Resumo de ocupação por time: nome, velocity, sprints ocupadas, tickets"""
        summary = []
        for team in self.result.teams:
            tickets = self.result.get_tickets_by_team(team.id)
            summary.append([
                team.name,
                f"{team.velocity:g}",
                str(team.filled_sprints),
                ", ".join(t.id for t in tickets) or "-",
            ])
        return summary

    def _generate_markdown(self) -> str:
        """Gera o conteúdo do relatório em Markdown"""
        state = self.result.state
        report = []

        report.append("# Relatório de Agendamento")
        report.append("")

        # 1. Resumo
        report.append("## 1. Resumo Geral")
        report.append("")
        report.append(f"- **Total de tickets:** {len(self.result.ordered_tickets)}")
        report.append(f"- **Total de times:** {len(self.result.teams)}")
        report.append(f"- **Sprints necessárias:** {self.sprint_count}")
        report.append("")

        # 2. Ordem de prioridade
        report.append("## 2. Ordem de Prioridade")
        report.append("")
        report.append("| # | ID | Título | Story Points | Valor | Sprints |")
        report.append("|---|----|--------|--------------|-------|---------|")
        for position, ticket in enumerate(self.result.ordered_tickets, start=1):
            sprints = "-"
            if ticket.id in state.start_sprint:
                start = state.start_sprint[ticket.id] + 1
                end = state.completion_sprint[ticket.id] + 1
                sprints = f"{start}" if start >= end else f"{start}-{end}"
            report.append(
                f"| {position} | {ticket.id} | {ticket.title} | {ticket.story_points:g} "
                f"| {ticket.business_value:g} | {sprints} |"
            )
        report.append("")

        # 3. Alocação por time
        report.append("## 3. Alocação por Time")
        report.append("")
        report.append("| Time | Velocity | Sprints Ocupadas | Tickets |")
        report.append("|------|----------|------------------|---------|")
        for line in self._team_summary():
            report.append(f"| {' | '.join(line)} |")
        report.append("")

        # 4. Gantt
        report.append("## 4. Gráfico de Gantt")
        report.append("")
        header = ["Time", "Ticket", *[str(i + 1) for i in range(self.sprint_count)]]
        report.append(f"| {' | '.join(header)} |")
        report.append(f"|{'|'.join('---' for _ in header)}|")
        for row in self.rows:
            cells = [self.marker if busy else " " for busy in row.cells]
            report.append(f"| {row.team_name} | {row.ticket_id} | {' | '.join(cells)} |")
        report.append("")

        # 5. Referências não resolvidas
        if self.result.warnings:
            report.append("## 5. Referências Não Resolvidas")
            report.append("")
            for warning in self.result.warnings:
                report.append(f"- {warning.describe()}")
            report.append("")

        return "\n".join(report)

    def _generate_excel(self) -> Path:
        """Gera o Gantt em Excel"""
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Gantt"

        thin = Side(style='thin')
        border = Border(left=thin, right=thin, top=thin, bottom=thin)
        headers = ["Time", "Ticket", "Título", *self.sprint_headers()]

        for col, value in enumerate(headers, start=1):
            cell = ws.cell(row=1, column=col, value=value)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.excel_colors['header']
            cell.alignment = Alignment(horizontal='center')
            cell.border = border

        for row_index, row in enumerate(self.rows, start=2):
            ws.cell(row=row_index, column=1, value=row.team_name).border = border
            ws.cell(row=row_index, column=2, value=row.ticket_id).border = border
            ws.cell(row=row_index, column=3, value=row.title).border = border
            for offset, busy in enumerate(row.cells):
                cell = ws.cell(row=row_index, column=4 + offset)
                cell.border = border
                if busy:
                    cell.fill = self.excel_colors['busy']

        ws.column_dimensions['A'].width = 20
        ws.column_dimensions['B'].width = 12
        ws.column_dimensions['C'].width = 40
        for col in range(4, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col)].width = 10
        ws.freeze_panes = 'D2'

        # Planilha de ocupação por time
        ws_teams = wb.create_sheet("Times")
        team_headers = ["Time", "Velocity", "Sprints Ocupadas", "Sprints Ociosas", "Tickets"]
        for col, value in enumerate(team_headers, start=1):
            cell = ws_teams.cell(row=1, column=col, value=value)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.excel_colors['header']
        for row_index, team in enumerate(self.result.teams, start=2):
            idle = len(team.sprints) - team.filled_sprints
            tickets = self.result.get_tickets_by_team(team.id)
            ws_teams.cell(row=row_index, column=1, value=team.name)
            ws_teams.cell(row=row_index, column=2, value=team.velocity)
            ws_teams.cell(row=row_index, column=3, value=team.filled_sprints)
            idle_cell = ws_teams.cell(row=row_index, column=4, value=idle)
            if idle:
                idle_cell.fill = self.excel_colors['idle']
            ws_teams.cell(row=row_index, column=5, value=", ".join(t.id for t in tickets))
        for col in range(1, len(team_headers) + 1):
            ws_teams.column_dimensions[get_column_letter(col)].width = 20

        excel_path = self.output_dir / f"{REPORT_NAME}.xlsx"
        wb.save(str(excel_path))
        logger.info(f"Relatório Excel gerado em {excel_path}")
        return excel_path

    def _generate_pdf(self) -> Path:
        """Gera o relatório em PDF"""
        pdf_path = self.output_dir / f"{REPORT_NAME}.pdf"
        doc = SimpleDocTemplate(
            str(pdf_path),
            pagesize=landscape(A4),
            rightMargin=1.5*cm,
            leftMargin=1.5*cm,
            topMargin=1.5*cm,
            bottomMargin=1.5*cm
        )
        available_width = doc.width
        elements = []

        elements.append(Paragraph("Relatório de Agendamento", self.styles['ReportTitle']))

        # 1. Resumo
        elements.append(Paragraph("1. Resumo Geral", self.styles['SectionHeading']))
        elements.append(Paragraph(f"Total de tickets: {len(self.result.ordered_tickets)}", self.styles['SummaryText']))
        elements.append(Paragraph(f"Total de times: {len(self.result.teams)}", self.styles['SummaryText']))
        elements.append(Paragraph(f"Sprints necessárias: {self.sprint_count}", self.styles['SummaryText']))
        elements.append(Spacer(1, 12))

        # 2. Ordem de prioridade
        elements.append(Paragraph("2. Ordem de Prioridade", self.styles['SectionHeading']))
        priority_data = [[
            Paragraph('#', self.styles['GridHeader']),
            Paragraph('ID', self.styles['GridHeader']),
            Paragraph('Título', self.styles['GridHeader']),
        ]]
        for position, ticket in enumerate(self.result.ordered_tickets, start=1):
            priority_data.append([
                str(position),
                Paragraph(ticket.id, self.styles['GridCell']),
                Paragraph(ticket.title, self.styles['GridCell']),
            ])
        priority_table = LongTable(
            priority_data,
            colWidths=[available_width * 0.08, available_width * 0.17, available_width * 0.75],
            repeatRows=1
        )
        priority_table.setStyle(self._create_table_style())
        elements.append(priority_table)
        elements.append(Spacer(1, 12))

        # 3. Alocação por time
        elements.append(Paragraph("3. Alocação por Time", self.styles['SectionHeading']))
        team_data = [[
            Paragraph(label, self.styles['GridHeader'])
            for label in ('Time', 'Velocity', 'Sprints Ocupadas', 'Tickets')
        ]]
        for line in self._team_summary():
            team_data.append([Paragraph(value, self.styles['GridCell']) for value in line])
        team_table = LongTable(
            team_data,
            colWidths=[available_width * 0.25, available_width * 0.1, available_width * 0.15, available_width * 0.5],
            repeatRows=1
        )
        team_table.setStyle(self._create_table_style())
        elements.append(team_table)
        elements.append(Spacer(1, 12))

        # 4. Gantt
        if self.rows:
            elements.append(Paragraph("4. Gráfico de Gantt", self.styles['SectionHeading']))
            gantt_data = [['Time', 'Ticket', *[str(i + 1) for i in range(self.sprint_count)]]]
            gantt_style = self._create_table_style()
            for row_index, row in enumerate(self.rows, start=1):
                gantt_data.append([row.team_name, row.ticket_id, *["" for _ in row.cells]])
                for offset, busy in enumerate(row.cells):
                    if busy:
                        gantt_style.add('BACKGROUND', (2 + offset, row_index), (2 + offset, row_index), colors.HexColor('#B3FFB3'))
            label_width = available_width * 0.3
            sprint_width = (available_width - label_width) / max(self.sprint_count, 1)
            gantt_table = LongTable(
                gantt_data,
                colWidths=[label_width * 0.6, label_width * 0.4, *[sprint_width] * self.sprint_count],
                repeatRows=1
            )
            gantt_table.setStyle(gantt_style)
            elements.append(gantt_table)
            elements.append(Spacer(1, 12))

        # 5. Referências não resolvidas
        if self.result.warnings:
            elements.append(Paragraph("5. Referências Não Resolvidas", self.styles['SectionHeading']))
            for warning in self.result.warnings:
                elements.append(Paragraph(warning.describe(), self.styles['SummaryText']))

        doc.build(elements)
        logger.info(f"Relatório PDF gerado em {pdf_path}")
        return pdf_path

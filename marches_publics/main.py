"""
MODULE: marches_publics.main
RESPONSIBILITY: Command line entry point over ContractService.
ALLOWED: argparse, rich, loguru, config.settings, core.dependency_injection.
FORBIDDEN: Business logic (everything goes through ContractService).
ERRORS: None propagated; exit code 1 when the operation reported an error.

Консольный интерфейс каталога контрактов.

Примеры:
  python -m marches_publics list --statut en_cours
  python -m marches_publics add --titre "..." --universite "..." --debut 2024-01-01 --fin 2025-01-01
  python -m marches_publics import export.json --replace
  python -m marches_publics doc-get <id> <doc_id> --dir ./downloads
"""

from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from marches_publics import __version__
from marches_publics.config.settings import Config
from marches_publics.core.dependency_injection import DependencyContainer
from marches_publics.core.models import STATUS_LABELS, ContractDraft, ContractRecord, ContractStatus, FilterQuery
from marches_publics.logger import configure_logging
from marches_publics.services.contract_service import ContractService
from marches_publics.services.document_codec import ACCEPTED_EXTENSIONS
from marches_publics.services.merge_engine import ImportStrategy
from marches_publics.utils.formatting import format_amount, format_file_size
from marches_publics.utils.notifications import NotificationLevel


class FrenchConfirm(Confirm):
    """Подтверждение o/n"""
    choices = ["o", "n"]
    validate_error_message = "[prompt.invalid]Répondez o (oui) ou n (non)"


def confirm_replace_prompt(current_count: int, incoming_count: int) -> bool:
    """Запрос подтверждения полной замены в консоли"""
    return FrenchConfirm.ask(
        f"Remplacer les {current_count} marchés existants par {incoming_count} marchés importés ? "
        f"Cette action est irréversible",
        default=False,
    )


def always_confirm(current_count: int, incoming_count: int) -> bool:
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="marches-publics",
        description="Catalogue local de marchés publics (documents et notes).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--env-file", dest="env_file", default=None, help="Chemin vers le fichier .env.")
    parser.add_argument("--data-dir", dest="data_dir", default=None, help="Répertoire des données (MP_DATA_DIR).")
    parser.add_argument("--log-level", dest="log_level", default=None,
                        help="Niveau de log Loguru (DEBUG, INFO, WARNING, ERROR).")

    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="Lister les marchés (avec filtres).")
    list_parser.add_argument("--statut", default="", choices=[""] + ContractStatus.values())
    list_parser.add_argument("--universite", default="", help="Sous-chaîne de l'université.")
    list_parser.add_argument("--recherche", default="", help="Recherche dans le titre ou la description.")

    show_parser = sub.add_parser("show", help="Afficher un marché.")
    show_parser.add_argument("id")

    add_parser = sub.add_parser("add", help="Créer un marché.")
    add_parser.add_argument("--titre", required=True)
    add_parser.add_argument("--universite", required=True)
    add_parser.add_argument("--annees", type=int, default=1)
    add_parser.add_argument("--statut", default=ContractStatus.PENDING.value, choices=ContractStatus.values())
    add_parser.add_argument("--montant", type=float, default=0.0)
    add_parser.add_argument("--debut", required=True, help="Date de début (YYYY-MM-DD).")
    add_parser.add_argument("--fin", required=True, help="Date de fin (YYYY-MM-DD).")
    add_parser.add_argument("--description", default="")

    edit_parser = sub.add_parser("edit", help="Modifier un marché.")
    edit_parser.add_argument("id")
    edit_parser.add_argument("--titre")
    edit_parser.add_argument("--universite")
    edit_parser.add_argument("--annees", type=int)
    edit_parser.add_argument("--statut", choices=ContractStatus.values())
    edit_parser.add_argument("--montant", type=float)
    edit_parser.add_argument("--debut")
    edit_parser.add_argument("--fin")
    edit_parser.add_argument("--description")

    delete_parser = sub.add_parser("delete", help="Supprimer un marché.")
    delete_parser.add_argument("id")

    import_parser = sub.add_parser("import", help="Importer un fichier JSON.")
    import_parser.add_argument("file", type=Path)
    import_parser.add_argument("--replace", action="store_true",
                               help="Remplacer toute la collection au lieu de fusionner.")
    import_parser.add_argument("--yes", action="store_true", help="Ne pas demander de confirmation.")

    export_parser = sub.add_parser("export", help="Exporter la collection en JSON.")
    export_parser.add_argument("--dir", dest="target_dir", type=Path, default=None)

    sub.add_parser("stats", help="Statistiques du tableau de bord.")
    sub.add_parser("seed", help="Ajouter des exemples si la collection est vide.")

    doc_add = sub.add_parser("doc-add", help="Joindre un document à un marché.")
    doc_add.add_argument("id")
    doc_add.add_argument("file", type=Path, help="Fichier (" + ", ".join(ACCEPTED_EXTENSIONS) + ").")
    doc_add.add_argument("--type", dest="mime_type", default=None, help="Type MIME (deviné sinon).")

    doc_get = sub.add_parser("doc-get", help="Télécharger un document.")
    doc_get.add_argument("id")
    doc_get.add_argument("doc_id")
    doc_get.add_argument("--dir", dest="target_dir", type=Path, default=None)

    doc_rm = sub.add_parser("doc-rm", help="Supprimer un document.")
    doc_rm.add_argument("id")
    doc_rm.add_argument("doc_id")

    note_add = sub.add_parser("note-add", help="Ajouter une note.")
    note_add.add_argument("id")
    note_add.add_argument("text")
    note_add.add_argument("--auteur", default=None)

    note_edit = sub.add_parser("note-edit", help="Modifier une note.")
    note_edit.add_argument("id")
    note_edit.add_argument("note_id")
    note_edit.add_argument("text")

    note_rm = sub.add_parser("note-rm", help="Supprimer une note.")
    note_rm.add_argument("id")
    note_rm.add_argument("note_id")
    note_rm.add_argument("--yes", action="store_true", help="Ne pas demander de confirmation.")

    return parser


def render_contracts(records: Sequence[ContractRecord], console: Console) -> None:
    if not records:
        console.print("Aucun marché trouvé")
        return

    table = Table(title=f"Marchés publics ({len(records)})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Titre")
    table.add_column("Université")
    table.add_column("Statut")
    table.add_column("Montant", justify="right")
    table.add_column("Période")
    table.add_column("Docs", justify="right")
    table.add_column("Notes", justify="right")
    for record in records:
        table.add_row(
            record.id,
            escape(record.title),
            escape(record.institution),
            STATUS_LABELS.get(record.status, record.status.value),
            format_amount(record.amount),
            f"{record.start_date} → {record.end_date}",
            str(len(record.documents)),
            str(len(record.notes)),
        )
    console.print(table)


def render_contract(record: ContractRecord, console: Console) -> None:
    console.print(f"[bold]{escape(record.title)}[/bold] ({record.id})")
    console.print(f"Université: {escape(record.institution)}")
    console.print(f"Statut: {STATUS_LABELS.get(record.status, record.status.value)}")
    console.print(f"Montant: {format_amount(record.amount)} | Durée: {record.duration_years} an(s)")
    console.print(f"Période: {record.start_date} → {record.end_date}")
    if record.description:
        console.print(escape(record.description))

    if record.documents:
        documents = Table(title=f"Documents ({len(record.documents)})")
        documents.add_column("ID", style="dim")
        documents.add_column("Nom")
        documents.add_column("Type")
        documents.add_column("Taille", justify="right")
        documents.add_column("Ajouté le")
        for doc in record.documents:
            documents.add_row(doc.id, escape(doc.name), doc.mime_type, format_file_size(doc.size), doc.added_at[:10])
        console.print(documents)

    for note in record.notes:
        console.print(f"[dim]{note.id}[/dim] Par {escape(note.author)} le {note.created_at[:10]}: {escape(note.content)}")


def _apply_edit(record: ContractRecord, args: argparse.Namespace) -> ContractRecord:
    changes = {
        "title": args.titre,
        "institution": args.universite,
        "duration_years": args.annees,
        "status": ContractStatus(args.statut) if args.statut else None,
        "amount": args.montant,
        "start_date": args.debut,
        "end_date": args.fin,
        "description": args.description,
    }
    return dataclasses.replace(record, **{key: value for key, value in changes.items() if value is not None})


def run_command(args: argparse.Namespace, service: ContractService, console: Console) -> None:
    command = args.command

    if command == "list":
        query = FilterQuery(status=args.statut, institution=args.universite, search=args.recherche)
        render_contracts(service.filter(query), console)
    elif command == "show":
        record = service.get(args.id)
        if record is None:
            service.notifier.error(f"Marché introuvable: {args.id}")
        else:
            render_contract(record, console)
    elif command == "add":
        service.create(ContractDraft(
            title=args.titre,
            institution=args.universite,
            duration_years=args.annees,
            status=ContractStatus(args.statut),
            amount=args.montant,
            start_date=args.debut,
            end_date=args.fin,
            description=args.description,
        ))
    elif command == "edit":
        record = service.get(args.id)
        if record is None:
            service.notifier.error(f"Marché introuvable: {args.id}")
        else:
            service.update(_apply_edit(record, args))
    elif command == "delete":
        service.delete(args.id)
    elif command == "import":
        strategy = ImportStrategy.REPLACE if args.replace else ImportStrategy.MERGE
        confirm = always_confirm if args.yes else confirm_replace_prompt
        service.import_file(args.file, strategy, confirm)
    elif command == "export":
        path = service.export(args.target_dir)
        if path is not None:
            console.print(str(path))
    elif command == "stats":
        stats = service.stats()
        console.print(f"Total: {stats.total}")
        console.print(f"En cours: {stats.in_progress}")
        console.print(f"Terminés: {stats.completed}")
        console.print(f"Montant total: {format_amount(stats.total_amount)}")
        institutions = service.institutions()
        if institutions:
            console.print("Universités: " + ", ".join(institutions))
    elif command == "seed":
        service.seed_examples()
    elif command == "doc-add":
        service.add_document_file(args.id, args.file, args.mime_type)
    elif command == "doc-get":
        path = service.download_document(args.id, args.doc_id, args.target_dir)
        if path is not None:
            console.print(str(path))
    elif command == "doc-rm":
        service.remove_document(args.id, args.doc_id)
    elif command == "note-add":
        service.add_note(args.id, args.text, args.auteur)
    elif command == "note-edit":
        service.edit_note(args.id, args.note_id, args.text)
    elif command == "note-rm":
        if args.yes or FrenchConfirm.ask("Êtes-vous sûr de vouloir supprimer cette note ?", default=False):
            service.delete_note(args.id, args.note_id)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = Config(args.env_file)
    if args.data_dir:
        config.storage = dataclasses.replace(config.storage, data_dir=Path(args.data_dir).expanduser())
    if args.log_level:
        config.logging = dataclasses.replace(config.logging, level=args.log_level)
    configure_logging(config.logging)
    if not config.validate():
        return 2

    container = DependencyContainer(config, confirm_replace=confirm_replace_prompt)
    service = container.get_contract_service()
    history = container.get_notification_history()

    console = Console()
    service.initialize(config.app.seed_examples)
    errors_before = len(history.messages(NotificationLevel.ERROR))
    run_command(args, service, console)
    errors_after = len(history.messages(NotificationLevel.ERROR))
    return 1 if errors_after > errors_before else 0


if __name__ == "__main__":
    sys.exit(main())

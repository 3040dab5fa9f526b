import os
from datetime import date

import click
from flask import current_app
from flask.cli import FlaskGroup

from questcert.app import create_app
from questcert.shared.certificates import CertificateRequest, render_certificate_sync
from questcert.shared.errors import CertificateRenderError
from questcert.shared.numbers import build_verify_url, generate_cert_no, next_certificate_serial
from questcert.shared.storage import certificate_dir, remove_year_certificates


cli = FlaskGroup(create_app=create_app)


@cli.command("gen_cert")
@click.option("--name", "student_name", required=True)
@click.option("--course", "course_title", required=True)
@click.option("--start", "start_date", default=None, help="ISO date (YYYY-MM-DD)")
@click.option("--end", "end_date", default=None, help="ISO date (YYYY-MM-DD)")
@click.option("--issue", "issue_date", default=None, help="ISO date; defaults to today")
@click.option("--performance", default=None)
@click.option("--remarks", default=None)
@click.option("--photo", "photo_source", default=None, help="Photo URL or file path")
@click.option("--cert-no", "cert_no", default=None, help="Certificate number; next free one if omitted")
@click.option("--out", "output_path", default=None, type=click.Path(dir_okay=False))
def gen_cert(
    student_name,
    course_title,
    start_date,
    end_date,
    issue_date,
    performance,
    remarks,
    photo_source,
    cert_no,
    output_path,
):
    """Render one certificate PDF and print its path."""
    cfg = current_app.config
    year = date.today().year
    out_dir = certificate_dir(cfg["SITE_ROOT"], year)
    if not cert_no:
        cert_no = generate_cert_no(next_certificate_serial(out_dir, year), year)
    payload = {
        "certNo": cert_no,
        "verifyUrl": build_verify_url(cfg["PUBLIC_APP_URL"], cert_no),
        "studentName": student_name,
        "courseTitle": course_title,
        "startDate": start_date,
        "endDate": end_date,
        "issueDate": issue_date or date.today().isoformat(),
        "performance": performance,
        "remarks": remarks,
        "studentPhotoSource": photo_source,
    }
    try:
        request = CertificateRequest.from_payload(
            payload, output_path=output_path or os.path.join(out_dir, f"{cert_no}.pdf")
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    try:
        path = render_certificate_sync(
            request,
            photo_timeout=cfg.get("PHOTO_FETCH_TIMEOUT"),
            date_locale=cfg["CERT_DATE_LOCALE"],
            branding=cfg.get("CERT_BRANDING"),
        )
    except CertificateRenderError as exc:
        click.echo(f"Certificate not produced: {exc}", err=True)
        raise SystemExit(1) from exc
    click.echo(path)


@cli.command("purge_certs")
@click.option("--year", required=True, type=int)
@click.option("--dry-run", is_flag=True, help="List certificate PDFs without deleting")
def purge_certs(year: int, dry_run: bool):
    paths = remove_year_certificates(current_app.config["SITE_ROOT"], year, dry_run=dry_run)
    for path in paths[:5]:
        click.echo(path)
    action = "matched" if dry_run else "deleted"
    summary = f"year={year} {action}={len(paths)}"
    click.echo(summary)
    current_app.logger.info("[CERT-PURGE] %s", summary)


if __name__ == "__main__":
    cli()

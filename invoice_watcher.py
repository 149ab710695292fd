#!/usr/bin/env python3
"""
Invoice Folder Watcher - Automatic Extraction

Watches a folder for new invoice PDFs and sends each one to the extraction
API. Invoices with every field recovered go to the processed folder; the
rest go to a review folder so someone can fill in the missing fields.

Usage:
    python invoice_watcher.py --watch-folder ./invoices-incoming
"""

import argparse
import time
import requests
from pathlib import Path
from datetime import datetime
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
import json

# Configuration
API_BASE_URL = "http://127.0.0.1:8000"


class InvoiceHandler(FileSystemEventHandler):
    """Handles new invoice file events"""

    def __init__(self, watch_folder, processed_folder, review_folder, api_url=API_BASE_URL, known_jobsites=None):
        self.watch_folder = Path(watch_folder)
        self.processed_folder = Path(processed_folder)
        self.review_folder = Path(review_folder)
        self.api_url = api_url
        self.known_jobsites = known_jobsites or []
        self.processed_files = set()

        # Create folders if they don't exist
        self.processed_folder.mkdir(exist_ok=True)
        self.review_folder.mkdir(exist_ok=True)

    def on_created(self, event):
        """Called when a file is created in the watched folder"""
        if event.is_directory:
            return

        file_path = Path(event.src_path)

        # Only process PDF files
        if file_path.suffix.lower() != '.pdf':
            return

        # Avoid processing the same file multiple times
        if file_path in self.processed_files:
            return

        # Small delay to ensure file is fully written
        time.sleep(1)

        # Check if file still exists (might have been moved)
        if not file_path.exists():
            return

        self.processed_files.add(file_path)
        self.process_invoice(file_path)

    def process_invoice(self, file_path: Path):
        """Send an invoice to the extraction API"""
        print("\n" + "="*70)
        print(f"NEW INVOICE DETECTED: {file_path.name}")
        print("="*70)
        print(f"Time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"Size: {file_path.stat().st_size:,} bytes")
        print()

        try:
            print("Uploading to API...")
            with open(file_path, 'rb') as f:
                files = {'file': (file_path.name, f, 'application/pdf')}
                data = {'known_jobsites': ",".join(self.known_jobsites)} if self.known_jobsites else None

                response = requests.post(
                    f"{self.api_url}/invoices/extract",
                    files=files,
                    data=data,
                    timeout=60
                )

            if response.status_code == 200:
                self.handle_success(file_path, response.json())
            else:
                print(f"API Error: {response.status_code}")
                print(f"   {response.text}")
                self.handle_error(file_path, f"API returned {response.status_code}")

        except requests.exceptions.Timeout:
            print("Request timed out")
            self.handle_error(file_path, "Timeout")
        except requests.exceptions.RequestException as e:
            print(f"Error: {str(e)}")
            self.handle_error(file_path, str(e))

    def destination_for(self, record: dict) -> Path:
        """Complete records go to processed; anything with a missing field (or an amount of null) needs review"""
        if record.get('missing_fields') or record.get('amount') is None:
            return self.review_folder
        return self.processed_folder

    def handle_success(self, file_path: Path, record: dict):
        """Route the file by whether extraction recovered every field"""
        print()
        print("EXTRACTION RESULTS:")
        print(f"   Client: {record.get('client_name')}")
        print(f"   Jobsite: {record.get('jobsite_name')}")
        print(f"   Invoice #: {record.get('invoice_number')}")
        print(f"   Date: {record.get('date')}")
        print(f"   Total: {record.get('amount')}")
        print()

        missing = record.get('missing_fields') or []
        if not missing:
            print("RESULT: ALL FIELDS EXTRACTED")
        else:
            print(f"RESULT: NEEDS REVIEW (missing: {', '.join(missing)})")

        dest_path = self.destination_for(record) / file_path.name
        file_path.rename(dest_path)
        print(f"\nMoved to: {dest_path}")

        self.log_processing(file_path.name, record, dest_path)

        print("="*70)

    def handle_error(self, file_path: Path, error_msg: str):
        """Handle processing error"""
        print(f"\nProcessing failed: {error_msg}")

        # Move to review for manual entry
        dest_path = self.review_folder / f"ERROR_{file_path.name}"
        file_path.rename(dest_path)
        print(f"Moved to: {dest_path}")
        print("="*70)

    def log_processing(self, filename: str, record: dict, dest_path: Path):
        """Append extraction results to a JSON log next to the watch folder"""
        log_file = self.watch_folder.parent / "extraction_log.json"

        if log_file.exists():
            with open(log_file, 'r') as f:
                log_data = json.load(f)
        else:
            log_data = []

        log_data.append({
            "timestamp": datetime.now().isoformat(),
            "filename": filename,
            "record": record,
            "missing_fields": record.get('missing_fields') or [],
            "destination": str(dest_path)
        })

        with open(log_file, 'w') as f:
            json.dump(log_data, f, indent=2)


def main():
    parser = argparse.ArgumentParser(
        description='Watch a folder for invoices and extract them automatically'
    )
    parser.add_argument(
        '--watch-folder',
        default='./invoices-incoming',
        help='Folder to watch for new invoices (default: ./invoices-incoming)'
    )
    parser.add_argument(
        '--processed-folder',
        default='./invoices-processed',
        help='Folder for fully extracted invoices (default: ./invoices-processed)'
    )
    parser.add_argument(
        '--review-folder',
        default='./invoices-review',
        help='Folder for invoices with missing fields (default: ./invoices-review)'
    )
    parser.add_argument(
        '--known-jobsites',
        default='',
        help='Comma-separated jobsite names to match extracted jobsites against'
    )
    parser.add_argument(
        '--api-url',
        default=API_BASE_URL,
        help=f'API base URL (default: {API_BASE_URL})'
    )

    args = parser.parse_args()

    watch_folder = Path(args.watch_folder)
    watch_folder.mkdir(exist_ok=True)

    known_jobsites = [name.strip() for name in args.known_jobsites.split(',') if name.strip()]
    event_handler = InvoiceHandler(
        args.watch_folder,
        args.processed_folder,
        args.review_folder,
        api_url=args.api_url,
        known_jobsites=known_jobsites
    )
    observer = Observer()
    observer.schedule(event_handler, str(watch_folder), recursive=False)
    observer.start()

    print("="*70)
    print("INVOICE WATCHER - AUTOMATIC EXTRACTION")
    print("="*70)
    print(f"Watching: {watch_folder.absolute()}")
    print(f"Complete -> {Path(args.processed_folder).absolute()}")
    print(f"Needs Review -> {Path(args.review_folder).absolute()}")
    print(f"API: {args.api_url}")
    print()
    print("Drop PDF invoices into the watch folder to process them")
    print("Press Ctrl+C to stop")
    print("="*70)
    print()

    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("\n\nStopping watcher...")
        observer.stop()

    observer.join()
    print("Watcher stopped")


if __name__ == "__main__":
    main()

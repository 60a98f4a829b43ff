#!/usr/bin/env python3
"""
Manual smoke script for the consultation API.

Usage:
1. Make sure the Django server is running: python manage.py runserver
2. Run this script: python check_consultation_api.py
"""

import json

import requests

# API config
BASE_URL = "http://localhost:8000/api"

SAMPLE_CONSULTATION = {
    "patient_id": "patient-42",
    "provider_id": "provider-7",
    "service_id": "1",
    "service_name": "Weight Management",
    "notes": {
        "hpi": "BMI 34, struggling with weight for 5 years.",
        "contraindications": "No known contra-indications...",
        "assessmentPlan": "Start GLP-1 therapy",
    },
    "medication_order": {
        "medications": [
            {
                "id": "semaglutide",
                "name": "Semaglutide",
                "dosage": "0.25mg",
                "frequency": "wkly",
                "approach": "Escalation",
                "instructions": ["• Inject SC once wkly.", "• Rotate sites."],
                "category": "wm",
            },
        ],
    },
    "follow_up": {"period": "4w", "display_text": "4 weeks", "template_id": "tpl-wm-4w"},
}


def _print_error(response):
    body = response.json()
    print(f"  - type:    {body.get('type')}")
    print(f"  - code:    {body.get('code')}")
    print(f"  - message: {body.get('message')}")
    if body.get('detail'):
        print(f"  - detail:  {json.dumps(body['detail'], indent=2)}")


def check_catalog():
    """GET /api/medications/"""
    print("\n" + "=" * 60)
    print("Check: medication catalog")
    print("=" * 60)

    response = requests.get(f"{BASE_URL}/medications/")
    print(f"Status: {response.status_code}")
    if response.status_code == 200:
        for category in response.json()['categories']:
            names = ', '.join(m['name'] for m in category['medications'])
            print(f"  - {category['name']}: {names}")


def check_interaction_preview(medications, contraindications):
    """POST /api/consultations/interactions/"""
    print("\n" + "=" * 60)
    print(f"Check: interactions for {medications} / {contraindications!r}")
    print("=" * 60)

    response = requests.post(
        f"{BASE_URL}/consultations/interactions/",
        json={'medications': [{'name': m} for m in medications], 'contraindications': contraindications},
    )
    print(f"Status: {response.status_code}")
    body = response.json()
    print(f"  - blocking: {body['blocking']}")
    for finding in body['findings']:
        print(f"  - [{finding['severity']}] {finding['message']}")


def check_submit(payload):
    """POST /api/consultations/"""
    print("\n" + "=" * 60)
    print("Check: submit consultation")
    print("=" * 60)

    response = requests.post(f"{BASE_URL}/consultations/", json=payload)
    print(f"Status: {response.status_code}")

    if response.status_code == 201:
        body = response.json()
        print(f"\n✅ {body['message']}")
        print(f"  - consultation: {body['consultationId']}")
        print(f"  - invoice:      {body['invoiceId']}")
        print(f"  - follow-up:    {body['followUpId']}")
        print(f"  - notified via: {', '.join(body['notifiedChannels']) or '-'}")
        for warning in body['warnings']:
            print(f"  ⚠️  {warning}")
    else:
        print("\n❌ Submission rejected")
        _print_error(response)


def main():
    try:
        check_catalog()
        check_interaction_preview(['Sildenafil', 'Tadalafil'], 'No known contra-indications...')
        check_interaction_preview(['Sildenafil'], 'Takes nitrate for angina')

        check_submit(SAMPLE_CONSULTATION)

        invalid = json.loads(json.dumps(SAMPLE_CONSULTATION))
        invalid['notes']['hpi'] = ''
        check_submit(invalid)

        blocked = json.loads(json.dumps(SAMPLE_CONSULTATION))
        blocked['notes']['contraindications'] = 'Takes nitrate for angina'
        blocked['medication_order']['medications'] = [
            {'id': 'sildenafil', 'name': 'Sildenafil', 'dosage': '50mg', 'frequency': 'PRN', 'approach': 'PRN'},
        ]
        check_submit(blocked)

    except requests.exceptions.ConnectionError:
        print("\n❌ Connection error: cannot reach the server")
        print("Make sure the Django server is running: python manage.py runserver")

    print("\n" + "=" * 60)
    print("Done")
    print("=" * 60)


if __name__ == "__main__":
    main()

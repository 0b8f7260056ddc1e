"""
medtriage/nlp/training_data.py
Labeled corpus for the intent classifier. Loaded once at startup.
Add lines freely — a restart retrains the model.
"""

from typing import List

from medtriage.models.record import TrainingExample as T

TRAINING_DATA: List[T] = [

    # ── Appointment scheduling ──
    T("How do I schedule an appointment?", "appointment"),
    T("I need to book a doctor visit", "appointment"),
    T("Can I reschedule my appointment?", "appointment"),
    T("What are your office hours?", "appointment"),
    T("Is Dr. Smith available next week?", "appointment"),
    T("I need to cancel my appointment", "appointment"),
    T("How long is the wait for an appointment?", "appointment"),
    T("Do you have any openings this week?", "appointment"),
    T("I'd like to schedule a checkup", "appointment"),
    T("I need to schedule a follow-up visit", "appointment"),

    # ── Prescription ──
    T("I need a refill on my medication", "prescription"),
    T("When can I pick up my prescription?", "prescription"),
    T("Are there side effects to my medication?", "prescription"),
    T("How should I take this medicine?", "prescription"),
    T("Can I get my prescription delivered?", "prescription"),
    T("I'm experiencing side effects from my medication", "prescription"),
    T("Is there a generic version of my medication?", "prescription"),
    T("How long should I take this medication?", "prescription"),

    # ── Billing ──
    T("I have a question about my bill", "billing"),
    T("Does my insurance cover this procedure?", "billing"),
    T("How much will this cost?", "billing"),
    T("Can I get a payment plan?", "billing"),
    T("I think there's an error on my bill", "billing"),
    T("When is payment due?", "billing"),
    T("Do you accept my insurance?", "billing"),
    T("What's my copay amount?", "billing"),

    # ── Technical ──
    T("I can't log into my account", "technical"),
    T("The website isn't working", "technical"),
    T("How do I reset my password?", "technical"),
    T("I'm having trouble with the app", "technical"),
    T("The video call isn't connecting", "technical"),
    T("I can't upload my documents", "technical"),
    T("The notification system isn't working", "technical"),
    T("How do I update my contact information?", "technical"),

    # ── Symptoms ──
    T("I have a headache that won't go away", "symptoms"),
    T("My child has a fever", "symptoms"),
    T("I'm experiencing chest pain", "symptoms"),
    T("Should I be concerned about this rash?", "symptoms"),
    T("I've been feeling dizzy lately", "symptoms"),
    T("My back pain is getting worse", "symptoms"),
    T("I have questions about my test results", "symptoms"),
    T("What should I do about these symptoms?", "symptoms"),
    T("I'm having trouble breathing", "symptoms"),
    T("My joints are swollen and painful", "symptoms"),
    T("I've been experiencing numbness in my hands", "symptoms"),
    T("My vision is blurry sometimes", "symptoms"),
    T("I've been more tired than usual lately", "symptoms"),
    T("I'm having digestive problems", "symptoms"),
    T("My skin is itchy all over", "symptoms"),
    T("I've noticed unusual weight loss", "symptoms"),

    # ── General ──
    T("What services do you offer?", "general"),
    T("Do you have specialists?", "general"),
    T("What are your COVID protocols?", "general"),
    T("How do I contact a doctor?", "general"),
    T("Do I need a referral to see a specialist?", "general"),
    T("What's your address?", "general"),
    T("Are you accepting new patients?", "general"),
    T("How do I prepare for my appointment?", "general"),

    # ── Preventive care ──
    T("When should I get a flu shot?", "preventive"),
    T("How often should I have a physical exam?", "preventive"),
    T("What screenings are recommended for my age?", "preventive"),
    T("Do you offer vaccination services?", "preventive"),
    T("How can I schedule a wellness check?", "preventive"),
    T("What preventive services are covered by insurance?", "preventive"),
    T("I need information about cancer screenings", "preventive"),
    T("What's the recommended schedule for child vaccinations?", "preventive"),

    # ── Emergency ──
    T("What should I do in case of emergency?", "emergency"),
    T("When should I go to the ER vs urgent care?", "emergency"),
    T("I think I'm having a medical emergency", "emergency"),
    T("What are the signs of a heart attack?", "emergency"),
    T("How do I know if I need emergency care?", "emergency"),
    T("What's your emergency contact number?", "emergency"),
    T("Do you have after-hours care?", "emergency"),
    T("What should I do if I have severe bleeding?", "emergency"),

    # ── Mental health ──
    T("Do you offer mental health services?", "mental_health"),
    T("I'm feeling depressed and need help", "mental_health"),
    T("How can I schedule a therapy appointment?", "mental_health"),
    T("Do you have psychiatrists available?", "mental_health"),
    T("I'm having anxiety attacks", "mental_health"),
    T("What mental health resources do you offer?", "mental_health"),
    T("I need help with stress management", "mental_health"),
    T("Do you prescribe medication for mental health conditions?", "mental_health"),
]

from crm_estimator.models.customer import Customer, Contact
from crm_estimator.models.opportunity import Opportunity
from crm_estimator.models.estimate import Estimate
from crm_estimator.models.letter_proposal import LetterProposal

__all__ = [
    "Customer",
    "Contact",
    "Opportunity",
    "Estimate",
    "LetterProposal",
]

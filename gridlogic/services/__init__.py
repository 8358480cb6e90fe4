from gridlogic.services.template_services import TemplateServices, template_services
from gridlogic.services.puzzle_services import PuzzleRound, PuzzleServices
from gridlogic.services.session_services import SessionService

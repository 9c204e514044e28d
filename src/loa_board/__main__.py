from loa_board.clients.disc import run

run()
